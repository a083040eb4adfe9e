#!/usr/bin/env python3
#
# azcmdlets/siterecovery.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Site recovery cmdlets: jobs, events, network mappings, and failover
of protected items and recovery plans.
Everything is scoped to one recovery services vault, named by
--vault_name in the resource group --resource_group.

Failover and network mapping updates wait for the operation and
print the protected item, recovery plan, or mapping it returns.
The job the service starts for them is visible with job_get.
'''
import base64
import uuid

from azure.mgmt.recoveryservicessiterecovery import SiteRecoveryManagementClient
from azure.mgmt.recoveryservicessiterecovery.models import (A2AFailoverProviderInput,
                                                            AzureToAzureUpdateNetworkMappingInput,
                                                            HyperVReplicaAzureFailbackProviderInput,
                                                            HyperVReplicaAzureFailoverProviderInput,
                                                            HyperVReplicaAzurePlannedFailoverProviderInput,
                                                            InMageAzureV2FailoverProviderInput,
                                                            InMageFailoverProviderInput,
                                                            PlannedFailoverInput,
                                                            PlannedFailoverInputProperties,
                                                            RecoveryPlanA2AFailoverInput,
                                                            RecoveryPlanHyperVReplicaAzureFailbackInput,
                                                            RecoveryPlanHyperVReplicaAzureFailoverInput,
                                                            RecoveryPlanInMageAzureV2FailoverInput,
                                                            RecoveryPlanInMageFailoverInput,
                                                            RecoveryPlanPlannedFailoverInput,
                                                            RecoveryPlanPlannedFailoverInputProperties,
                                                            RecoveryPlanUnplannedFailoverInput,
                                                            RecoveryPlanUnplannedFailoverInputProperties,
                                                            ResumeJobParams,
                                                            ResumeJobParamsProperties,
                                                            UnplannedFailoverInput,
                                                            UnplannedFailoverInputProperties,
                                                            UpdateNetworkMappingInput,
                                                            UpdateNetworkMappingInputProperties,
                                                            VmmToAzureUpdateNetworkMappingInput,
                                                            VmmToVmmUpdateNetworkMappingInput,
                                                           )

import azcmdlets.base_defaults
from azcmdlets.azresourceid import value_from_id
from azcmdlets.btypes import (AsrEventSeverity,
                              AsrEventType,
                              AsrFailbackOptimize,
                              AsrFailoverDirection,
                              AsrJobState,
                              AsrRecoveryTag,
                             )
from azcmdlets.cmdlet import (PresentationModel,
                              ServiceFacade,
                              ServiceManager,
                             )
from azcmdlets.command import Command
from azcmdlets.exceptions import InvalidOperationError
from azcmdlets.parametersets import ParameterSet
from azcmdlets.util import (datetime_normalize,
                            json_or_file_load,
                            odata_and,
                            odata_eq,
                           )

# ID segments that precede the names of nested vault resources
SEGMENT_JOBS = 'replicationJobs'
SEGMENT_EVENTS = 'replicationEvents'
SEGMENT_FABRICS = 'replicationFabrics'
SEGMENT_NETWORKS = 'replicationNetworks'
SEGMENT_CONTAINERS = 'replicationProtectionContainers'
SEGMENT_PROTECTED_ITEMS = 'replicationProtectedItems'

# Azure to Azure mappings live under this network name
AZURE_NETWORK = 'azureNetwork'
# Recovery fabric of Hyper-V site to Azure mappings
AZURE_FABRIC_NAME = 'Microsoft Azure'

# Scenario of jobs that may not be resumed
SCENARIO_TEST_FAILOVER = 'TestFailover'

# Replication providers (provider_specific_details.instance_type)
PROVIDER_A2A = 'A2A'
PROVIDER_HYPERV_REPLICA_AZURE = 'HyperVReplicaAzure'
PROVIDER_INMAGE = 'InMage'
PROVIDER_INMAGE_AZURE_V2 = 'InMageAzureV2'

# recovery_tag -> recovery point type of recovery plan failover inputs; Latest otherwise
RECOVERY_POINT_TYPES = {AsrRecoveryTag.LATEST_AVAILABLE : 'LatestProcessed',
                        AsrRecoveryTag.LATEST_AVAILABLE_APPLICATION_CONSISTENT : 'LatestApplicationConsistent',
                        AsrRecoveryTag.LATEST_AVAILABLE_CRASH_CONSISTENT : 'LatestCrashConsistent',
                       }

def odata_time_eq(path, value):
    '''
    OData clause comparing path with an aware datetime value, or None
    '''
    if value is None:
        return None
    return odata_eq(path, value.isoformat())

def provider_is(value, provider):
    return (value or '').lower() == provider.lower()

def inmage_recovery_point_type(recovery_tag):
    '''
    InMage failover takes the latest tagged point only for application consistency
    '''
    if recovery_tag is AsrRecoveryTag.LATEST_AVAILABLE_APPLICATION_CONSISTENT:
        return 'LatestTag'
    return 'LatestTime'

def multi_vm_group_is_own(item):
    '''
    InMage items may only fail over alone when their multi-VM group
    is the one made for them at protection: its name is a non-zero
    GUID equal to its ID.
    '''
    name = item.multi_vm_group_name or ''
    try:
        guid = uuid.UUID(name)
    except ValueError:
        return False
    return (guid.int != 0) and (name == item.multi_vm_group_id)

def certificate_file_load(path, key, exc_value):
    '''
    Return the content of the certificate file at path as base64 text, or None
    '''
    if not path:
        return None
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as exc:
        raise exc_value("%s: cannot read %r: %r" % (key, path, exc)) from exc
    return base64.b64encode(data).decode('ascii')

######################################################################
# presentation models

class AsrJobModel(PresentationModel):
    '''
    azure.mgmt.recoveryservicessiterecovery.models.Job
    '''
    FIELDS = ('name',
              'id',
              ('activity_id', 'properties.activity_id'),
              ('scenario_name', 'properties.scenario_name'),
              ('display_name', 'properties.friendly_name'),
              ('state', 'properties.state'),
              ('state_description', 'properties.state_description'),
              ('target_object_id', 'properties.target_object_id'),
              ('target_object_name', 'properties.target_object_name'),
              ('target_instance_type', 'properties.target_instance_type'),
              ('start_time', 'properties.start_time'),
              ('end_time', 'properties.end_time'),
              ('allowed_actions', 'properties.allowed_actions'),
             )
    TABLE_COLUMNS = ('name', 'display_name', 'state', 'start_time')

class AsrEventModel(PresentationModel):
    '''
    azure.mgmt.recoveryservicessiterecovery.models.Event
    '''
    FIELDS = ('name',
              'id',
              ('event_code', 'properties.event_code'),
              ('description', 'properties.description'),
              ('event_type', 'properties.event_type'),
              ('affected_object_friendly_name', 'properties.affected_object_friendly_name'),
              ('severity', 'properties.severity'),
              ('time_of_occurrence', 'properties.time_of_occurrence'),
              ('fabric_id', 'properties.fabric_id'),
             )
    TABLE_COLUMNS = ('name', 'event_type', 'severity', 'time_of_occurrence')

class AsrNetworkMappingModel(PresentationModel):
    '''
    azure.mgmt.recoveryservicessiterecovery.models.NetworkMapping
    '''
    FIELDS = ('name',
              'id',
              ('state', 'properties.state'),
              ('primary_network_friendly_name', 'properties.primary_network_friendly_name'),
              ('primary_network_id', 'properties.primary_network_id'),
              ('primary_fabric_friendly_name', 'properties.primary_fabric_friendly_name'),
              ('recovery_network_friendly_name', 'properties.recovery_network_friendly_name'),
              ('recovery_network_id', 'properties.recovery_network_id'),
              ('recovery_fabric_arm_id', 'properties.recovery_fabric_arm_id'),
              ('recovery_fabric_friendly_name', 'properties.recovery_fabric_friendly_name'),
             )
    TABLE_COLUMNS = ('name', 'primary_network_friendly_name', 'recovery_network_friendly_name', 'state')

class AsrProtectedItemModel(PresentationModel):
    '''
    azure.mgmt.recoveryservicessiterecovery.models.ReplicationProtectedItem
    '''
    FIELDS = ('name',
              'id',
              ('display_name', 'properties.friendly_name'),
              ('protection_state', 'properties.protection_state'),
              ('replication_health', 'properties.replication_health'),
              ('active_location', 'properties.active_location'),
              ('allowed_operations', 'properties.allowed_operations'),
              ('primary_fabric_friendly_name', 'properties.primary_fabric_friendly_name'),
              ('recovery_fabric_friendly_name', 'properties.recovery_fabric_friendly_name'),
              ('replication_provider', 'properties.provider_specific_details.instance_type'),
              ('multi_vm_group_id', 'properties.provider_specific_details.multi_vm_group_id'),
              ('multi_vm_group_name', 'properties.provider_specific_details.multi_vm_group_name'),
             )
    TABLE_COLUMNS = ('name', 'display_name', 'protection_state', 'replication_provider')

class AsrRecoveryPlanModel(PresentationModel):
    '''
    azure.mgmt.recoveryservicessiterecovery.models.RecoveryPlan
    '''
    FIELDS = ('name',
              'id',
              ('display_name', 'properties.friendly_name'),
              ('primary_fabric_friendly_name', 'properties.primary_fabric_friendly_name'),
              ('recovery_fabric_friendly_name', 'properties.recovery_fabric_friendly_name'),
              ('failover_deployment_model', 'properties.failover_deployment_model'),
              ('replication_providers', 'properties.replication_providers'),
              ('allowed_operations', 'properties.allowed_operations'),
              ('current_scenario_status', 'properties.current_scenario_status'),
             )
    TABLE_COLUMNS = ('name', 'display_name', 'current_scenario_status')

######################################################################
# facade

class SiteRecoveryFacade(ServiceFacade):
    '''
    self.client is azure.mgmt.recoveryservicessiterecovery.SiteRecoveryManagementClient.
    Operations are scoped to one vault.
    '''
    def __init__(self, client, logger, resource_group='', vault_name='', **kwargs):
        super().__init__(client, logger, **kwargs)
        self.resource_group = resource_group
        self.vault_name = vault_name

    def __repr__(self):
        return "<%s %s/%s>" % (type(self).__name__, self.resource_group, self.vault_name)

    @property
    def scope(self):
        '''
        Getter: vault scope keyword arguments
        '''
        return {'resource_group_name' : self.resource_group,
                'resource_name' : self.vault_name,
               }

    ######################################################################
    # jobs

    def job_get(self, name):
        '''
        Return AsrJobModel or None
        '''
        return AsrJobModel.from_sdk(self._cw_get(self.client.replication_jobs.get, job_name=name, **self.scope))

    def _job_page(self, filter=None, next_link=None): # pylint: disable=redefined-builtin
        '''
        One page of jobs
        '''
        return self._cw_page(self.client.replication_jobs.list, next_link=next_link, transform=AsrJobModel.from_sdk, filter=filter, **self.scope)

    def job_list(self, filter=None, next_link=None, walk=True): # pylint: disable=redefined-builtin
        '''
        List jobs, optionally with an OData filter
        '''
        return self._pages(self._job_page, filter=filter, next_link=next_link, walk=walk)

    def job_resume(self, name, comment):
        '''
        Resume the job and wait for the resume operation.
        Returns the job as read back afterwards.
        '''
        params = ResumeJobParams(properties=ResumeJobParamsProperties(comments=comment))
        poller = self._cw_call(self.client.replication_jobs.begin_resume, job_name=name, resume_job_params=params, **self.scope)
        result = self._cw_call(poller.result)
        return self.job_get(getattr(result, 'name', None) or name)

    ######################################################################
    # events

    def event_get(self, name):
        '''
        Return AsrEventModel or None
        '''
        return AsrEventModel.from_sdk(self._cw_get(self.client.replication_events.get, event_name=name, **self.scope))

    def _event_page(self, filter=None, next_link=None): # pylint: disable=redefined-builtin
        '''
        One page of events
        '''
        return self._cw_page(self.client.replication_events.list, next_link=next_link, transform=AsrEventModel.from_sdk, filter=filter, **self.scope)

    def event_list(self, filter=None, next_link=None, walk=True): # pylint: disable=redefined-builtin
        '''
        List events, optionally with an OData filter
        '''
        return self._pages(self._event_page, filter=filter, next_link=next_link, walk=walk)

    ######################################################################
    # network mappings

    def network_mapping_get(self, fabric_name, network_name, name):
        '''
        Return AsrNetworkMappingModel or None
        '''
        return AsrNetworkMappingModel.from_sdk(self._cw_get(self.client.replication_network_mappings.get,
                                                            fabric_name=fabric_name,
                                                            network_name=network_name,
                                                            network_mapping_name=name,
                                                            **self.scope))

    def _network_mapping_page(self, fabric_name=None, network_name=None, next_link=None):
        '''
        One page of network mappings, all of them or those of one network
        '''
        ops = self.client.replication_network_mappings
        if fabric_name:
            return self._cw_page(ops.list_by_replication_networks, next_link=next_link, transform=AsrNetworkMappingModel.from_sdk,
                                 fabric_name=fabric_name, network_name=network_name, **self.scope)
        return self._cw_page(ops.list, next_link=next_link, transform=AsrNetworkMappingModel.from_sdk, **self.scope)

    def network_mapping_list(self, fabric_name=None, network_name=None, next_link=None, walk=True):
        '''
        List network mappings
        '''
        return self._pages(self._network_mapping_page, fabric_name=fabric_name, network_name=network_name, next_link=next_link, walk=walk)

    def _poll(self, op, **kwargs):
        '''
        Start the long-running op in this vault and return its result
        '''
        kwargs.update(self.scope)
        poller = self._cw_call(op, **kwargs)
        return self._cw_call(poller.result)

    def network_mapping_update(self, fabric_name, network_name, name, recovery_fabric_name, recovery_network_id, fabric_specific_details):
        '''
        Point the mapping at another recovery network and wait for it.
        Returns the mapping as updated.
        '''
        params = UpdateNetworkMappingInput(properties=UpdateNetworkMappingInputProperties(recovery_fabric_name=recovery_fabric_name,
                                                                                          recovery_network_id=recovery_network_id,
                                                                                          fabric_specific_details=fabric_specific_details))
        result = self._poll(self.client.replication_network_mappings.begin_update,
                            fabric_name=fabric_name,
                            network_name=network_name,
                            network_mapping_name=name,
                            input=params)
        return AsrNetworkMappingModel.from_sdk(result) or self.network_mapping_get(fabric_name, network_name, name)

    ######################################################################
    # protected items

    def protected_item_get(self, fabric_name, container_name, name):
        '''
        Return AsrProtectedItemModel or None
        '''
        return AsrProtectedItemModel.from_sdk(self._cw_get(self.client.replication_protected_items.get,
                                                           fabric_name=fabric_name,
                                                           protection_container_name=container_name,
                                                           replicated_protected_item_name=name,
                                                           **self.scope))

    def _protected_item_poll(self, op, fabric_name, container_name, name, **kwargs):
        result = self._poll(op,
                            fabric_name=fabric_name,
                            protection_container_name=container_name,
                            replicated_protected_item_name=name,
                            **kwargs)
        return AsrProtectedItemModel.from_sdk(result) or self.protected_item_get(fabric_name, container_name, name)

    def protected_item_planned_failover(self, fabric_name, container_name, name, direction, provider_specific_details=None):
        '''
        Planned failover of one protected item in direction (AsrFailoverDirection)
        '''
        params = PlannedFailoverInput(properties=PlannedFailoverInputProperties(failover_direction=direction.value,
                                                                                provider_specific_details=provider_specific_details))
        return self._protected_item_poll(self.client.replication_protected_items.begin_planned_failover,
                                         fabric_name, container_name, name, failover_input=params)

    def protected_item_unplanned_failover(self, fabric_name, container_name, name, direction, source_site_operations, provider_specific_details=None):
        '''
        Unplanned failover of one protected item in direction (AsrFailoverDirection)
        '''
        params = UnplannedFailoverInput(properties=UnplannedFailoverInputProperties(failover_direction=direction.value,
                                                                                    source_site_operations=source_site_operations,
                                                                                    provider_specific_details=provider_specific_details))
        return self._protected_item_poll(self.client.replication_protected_items.begin_unplanned_failover,
                                         fabric_name, container_name, name, failover_input=params)

    def protected_item_commit_failover(self, fabric_name, container_name, name):
        '''
        Commit the failover of one protected item
        '''
        return self._protected_item_poll(self.client.replication_protected_items.begin_failover_commit,
                                         fabric_name, container_name, name)

    ######################################################################
    # recovery plans

    def recovery_plan_get(self, name):
        '''
        Return AsrRecoveryPlanModel or None
        '''
        return AsrRecoveryPlanModel.from_sdk(self._cw_get(self.client.replication_recovery_plans.get, recovery_plan_name=name, **self.scope))

    def _recovery_plan_poll(self, op, name, **kwargs):
        result = self._poll(op, recovery_plan_name=name, **kwargs)
        return AsrRecoveryPlanModel.from_sdk(result) or self.recovery_plan_get(name)

    def recovery_plan_planned_failover(self, name, direction, provider_specific_details=None):
        '''
        Planned failover of a recovery plan.
        provider_specific_details is a list with at most one input per provider.
        '''
        params = RecoveryPlanPlannedFailoverInput(properties=RecoveryPlanPlannedFailoverInputProperties(failover_direction=direction.value,
                                                                                                        provider_specific_details=provider_specific_details or None))
        return self._recovery_plan_poll(self.client.replication_recovery_plans.begin_planned_failover, name, input=params)

    def recovery_plan_unplanned_failover(self, name, direction, source_site_operations, provider_specific_details=None):
        '''
        Unplanned failover of a recovery plan
        '''
        params = RecoveryPlanUnplannedFailoverInput(properties=RecoveryPlanUnplannedFailoverInputProperties(failover_direction=direction.value,
                                                                                                            source_site_operations=source_site_operations,
                                                                                                            provider_specific_details=provider_specific_details or None))
        return self._recovery_plan_poll(self.client.replication_recovery_plans.begin_unplanned_failover, name, input=params)

    def recovery_plan_commit_failover(self, name):
        return self._recovery_plan_poll(self.client.replication_recovery_plans.begin_failover_commit, name)

######################################################################
# cmdlets

command = Command()

class Manager(ServiceManager):
    '''
    Site recovery cmdlets. The vault is --vault_name in --resource_group.
    '''
    ACTION_ARGS = (('vault_name', {'help' : 'recovery services vault name'}),
                   ('name', {'help' : 'job, event, or network mapping name'}),
                   ('resource_id', {'help' : 'job or event resource ID'}),
                   ('job', {'help' : 'job object as JSON or a path to a JSON file'}),
                   ('start_time', {'help' : 'start of time range (ISO 8601)'}),
                   ('end_time', {'help' : 'end of time range (ISO 8601)'}),
                   ('target_object_id', {'help' : 'job target object ID'}),
                   ('state', {'help' : 'job state (%s)' % ', '.join(AsrJobState.values(sort=False))}),
                   ('comment', {'help' : 'job resume comment'}),
                   ('event_type', {'help' : 'event type (%s)' % ', '.join(AsrEventType.values(sort=False))}),
                   ('severity', {'help' : 'event severity (%s)' % ', '.join(AsrEventSeverity.values(sort=False))}),
                   ('fabric_name', {'help' : 'fabric name'}),
                   ('fabric_id', {'help' : 'fabric resource ID'}),
                   ('affected_object_friendly_name', {'help' : 'event affected object friendly name'}),
                   ('network_name', {'help' : 'primary network name'}),
                   ('mapping', {'help' : 'network mapping object (as printed by network_mapping_get) as JSON or a path to a JSON file'}),
                   ('recovery_network_id', {'help' : 'recovery site network resource ID'}),
                   ('recovery_azure_network_id', {'help' : 'recovery Azure virtual network resource ID'}),
                   ('protected_item_id', {'help' : 'replication protected item resource ID'}),
                   ('recovery_plan_name', {'help' : 'recovery plan name'}),
                   ('direction', {'help' : 'failover direction (%s)' % ', '.join(AsrFailoverDirection.values(sort=False))}),
                   ('optimize', {'help' : 'failback data sync (%s)' % ', '.join(AsrFailbackOptimize.values(sort=False))}),
                   ('create_vm_if_not_found', {'action' : 'store_true', 'help' : 'failback creates the on-premises VM if it does not exist'}),
                   ('perform_source_side_action', {'action' : 'store_true', 'help' : 'shut down the source side before an unplanned failover'}),
                   ('recovery_point_id', {'help' : 'recovery point resource ID for a protected item failover'}),
                   ('recovery_tag', {'help' : 'recovery point to fail over to (%s)' % ', '.join(AsrRecoveryTag.values(sort=False))}),
                   ('primary_kek_certificate_file', {'help' : 'data encryption primary certificate file'}),
                   ('secondary_kek_certificate_file', {'help' : 'data encryption secondary certificate file'}),
                  )

    def siterecovery_facade(self, vault_name=None):
        '''
        Return SiteRecoveryFacade scoped to the vault
        '''
        if not vault_name:
            raise self.exc_value("'vault_name' not specified")
        client = self._az_client_gen_property('siterecovery', SiteRecoveryManagementClient)
        return SiteRecoveryFacade(client, self.logger,
                                  resource_group=self.resource_group_effective(self.resource_group, exc_value=self.exc_value),
                                  vault_name=vault_name,
                                  exc_value=self.exc_value)

    def _name_from_id(self, resource_id, segment, desc):
        '''
        Return the name following segment in resource_id or raise
        '''
        ret = value_from_id(resource_id, segment)
        if not ret:
            raise self.exc_value("%r is not a %s ID" % (resource_id, desc))
        return ret

    def _job_name_from_object(self, job):
        '''
        job is a job object (as printed by job_get) as JSON or a path.
        Return its name.
        '''
        data = json_or_file_load(job, key='job', exc_value=self.exc_value)
        if not isinstance(data, dict):
            raise self.exc_value("job must be a JSON object")
        ret = data.get('name', None) or value_from_id(data.get('id', None), SEGMENT_JOBS)
        if not ret:
            raise self.exc_value("job object has no name")
        return ret

    def _mapping_from_object(self, mapping):
        '''
        mapping is a network mapping object (as printed by network_mapping_get)
        as JSON or a path. Return it as AsrNetworkMappingModel.
        '''
        data = json_or_file_load(mapping, key='mapping', exc_value=self.exc_value)
        if not isinstance(data, dict):
            raise self.exc_value("mapping must be a JSON object")
        ret = AsrNetworkMappingModel(**{k : data.get(k, None) for k in AsrNetworkMappingModel.field_names()})
        if not ret.name:
            ret.name = value_from_id(ret.id, 'replicationNetworkMappings')
        if not (ret.name and ret.id):
            raise self.exc_value("mapping object must have id and name")
        return ret

    def _protected_item_resolve(self, facade, protected_item_id):
        '''
        Return (fabric_name, container_name, AsrProtectedItemModel) for protected_item_id
        '''
        fabric_name = self._name_from_id(protected_item_id, SEGMENT_FABRICS, 'protected item')
        container_name = self._name_from_id(protected_item_id, SEGMENT_CONTAINERS, 'protected item')
        name = self._name_from_id(protected_item_id, SEGMENT_PROTECTED_ITEMS, 'protected item')
        item = facade.protected_item_get(fabric_name, container_name, name)
        if not item:
            raise self.exc_value("protected item %r not found" % protected_item_id)
        return (fabric_name, container_name, item)

    def _recovery_plan_resolve(self, facade, name):
        plan = facade.recovery_plan_get(name)
        if not plan:
            raise self.exc_value("recovery plan %r not found" % name)
        return plan

    @staticmethod
    def _multi_vm_group_check(item, action):
        '''
        Refuse action on InMage items that belong to a shared multi-VM group
        '''
        provider = item.replication_provider
        if (provider_is(provider, PROVIDER_INMAGE) or provider_is(provider, PROVIDER_INMAGE_AZURE_V2)) and (not multi_vm_group_is_own(item)):
            raise InvalidOperationError("%s of %s protected item %r in multi-VM group %r is not supported" % (action, provider, item.name, item.multi_vm_group_name))

    ######################################################################
    # jobs

    JOB_GET_SETS = (ParameterSet('ByName', required=('name',)),
                    ParameterSet('ByResourceId', required=('resource_id',)),
                    ParameterSet('ByObject', required=('job',)),
                    ParameterSet('ByParam', optional=('start_time', 'end_time', 'target_object_id', 'state')),
                   )

    @command.printable
    def job_get(self, vault_name=None, name=None, resource_id=None, job=None, start_time=None, end_time=None, target_object_id=None, state=None):
        '''
        Get one job, or list jobs matching the given parameters
        '''
        ps = self.parameter_set_select(self.JOB_GET_SETS,
                                       {'name' : name,
                                        'resource_id' : resource_id,
                                        'job' : job,
                                        'start_time' : start_time,
                                        'end_time' : end_time,
                                        'target_object_id' : target_object_id,
                                        'state' : state,
                                       },
                                       default='ByParam')
        facade = self.siterecovery_facade(vault_name=vault_name)
        if ps.name == 'ByName':
            return facade.job_get(name)
        if ps.name == 'ByResourceId':
            return facade.job_get(self._name_from_id(resource_id, SEGMENT_JOBS, 'site recovery job'))
        if ps.name == 'ByObject':
            return facade.job_get(self._job_name_from_object(job))
        job_state = AsrJobState.coerce_optional(state, exc_value=self.exc_value, prefix='state')
        filt = odata_and(odata_time_eq('startTime', datetime_normalize(start_time, key='start_time', exc_value=self.exc_value)),
                         odata_time_eq('endTime', datetime_normalize(end_time, key='end_time', exc_value=self.exc_value)),
                         odata_eq('targetObjectId', target_object_id),
                         odata_eq('jobStatus', job_state.value if job_state else None))
        return facade.job_list(filter=filt)

    JOB_RESUME_SETS = (ParameterSet('ByName', required=('name',), optional=('comment',)),
                       ParameterSet('ByObject', required=('job',), optional=('comment',)),
                      )

    @command.printable
    def job_resume(self, vault_name=None, name=None, job=None, comment=None):
        '''
        Resume a suspended job. Test failover jobs may not be resumed.
        '''
        ps = self.parameter_set_select(self.JOB_RESUME_SETS, {'name' : name, 'job' : job, 'comment' : comment})
        if ps.name == 'ByObject':
            name = self._job_name_from_object(job)
        facade = self.siterecovery_facade(vault_name=vault_name)
        existing = facade.job_get(name)
        if existing and ((existing.scenario_name or '').lower() == SCENARIO_TEST_FAILOVER.lower()):
            raise InvalidOperationError("resuming %s job %r is not supported" % (SCENARIO_TEST_FAILOVER, existing.name))
        comment = comment or azcmdlets.base_defaults.SITE_RECOVERY_RESUME_COMMENT_DEFAULT
        self.logger.info("%s resume job %r in vault %s/%s", self.mth(), name, facade.resource_group, facade.vault_name)
        return facade.job_resume(name, comment)

    ######################################################################
    # events

    EVENT_GET_SETS = (ParameterSet('ByName', required=('name',)),
                      ParameterSet('ByResourceId', required=('resource_id',)),
                      ParameterSet('ByFabricId', required=('fabric_id',), optional=('affected_object_friendly_name', 'severity', 'start_time', 'end_time', 'event_type')),
                      ParameterSet('ByParam', optional=('fabric_name', 'affected_object_friendly_name', 'severity', 'start_time', 'end_time', 'event_type')),
                     )

    @command.printable
    def event_get(self, vault_name=None, name=None, resource_id=None, fabric_id=None, fabric_name=None,
                  affected_object_friendly_name=None, severity=None, start_time=None, end_time=None, event_type=None):
        '''
        Get one event, or list events matching the given parameters
        '''
        ps = self.parameter_set_select(self.EVENT_GET_SETS,
                                       {'name' : name,
                                        'resource_id' : resource_id,
                                        'fabric_id' : fabric_id,
                                        'fabric_name' : fabric_name,
                                        'affected_object_friendly_name' : affected_object_friendly_name,
                                        'severity' : severity,
                                        'start_time' : start_time,
                                        'end_time' : end_time,
                                        'event_type' : event_type,
                                       },
                                       default='ByParam')
        facade = self.siterecovery_facade(vault_name=vault_name)
        if ps.name == 'ByName':
            return facade.event_get(name)
        if ps.name == 'ByResourceId':
            return facade.event_get(self._name_from_id(resource_id, SEGMENT_EVENTS, 'site recovery event'))
        if ps.name == 'ByFabricId':
            fabric_name = self._name_from_id(fabric_id, SEGMENT_FABRICS, 'site recovery fabric')
        etype = AsrEventType.coerce_optional(event_type, exc_value=self.exc_value, prefix='event_type')
        sev = AsrEventSeverity.coerce_optional(severity, exc_value=self.exc_value, prefix='severity')
        filt = odata_and(odata_eq('eventType', etype.value if etype else None),
                         odata_eq('severity', sev.value if sev else None),
                         odata_eq('fabricName', fabric_name),
                         odata_eq('affectedObjectFriendlyName', affected_object_friendly_name),
                         odata_time_eq('startTime', datetime_normalize(start_time, key='start_time', exc_value=self.exc_value)),
                         odata_time_eq('endTime', datetime_normalize(end_time, key='end_time', exc_value=self.exc_value)))
        return facade.event_list(filter=filt)

    ######################################################################
    # network mappings

    NETWORK_MAPPING_GET_SETS = (ParameterSet('ByNetwork', required=('fabric_name', 'network_name'), optional=('name',)),
                                ParameterSet('ByName', required=('name',)),
                                ParameterSet('All'),
                               )

    @command.printable
    def network_mapping_get(self, vault_name=None, fabric_name=None, network_name=None, name=None):
        '''
        Get network mappings of one primary network, all of them, or those with a given name
        '''
        ps = self.parameter_set_select(self.NETWORK_MAPPING_GET_SETS,
                                       {'fabric_name' : fabric_name,
                                        'network_name' : network_name,
                                        'name' : name,
                                       },
                                       default='All')
        facade = self.siterecovery_facade(vault_name=vault_name)
        if ps.name == 'ByNetwork':
            if name:
                return facade.network_mapping_get(fabric_name, network_name, name)
            return facade.network_mapping_list(fabric_name=fabric_name, network_name=network_name)
        ret = facade.network_mapping_list()
        if ps.name == 'ByName':
            ret = [x for x in ret if (x.name or '').lower() == name.lower()]
        return ret

    NETWORK_MAPPING_UPDATE_SETS = (ParameterSet('ByNetwork', required=('mapping', 'recovery_network_id')),
                                   ParameterSet('ByAzureNetworkId', required=('mapping', 'recovery_azure_network_id')),
                                  )

    @command.printable
    def network_mapping_update(self, vault_name=None, mapping=None, recovery_network_id=None, recovery_azure_network_id=None):
        '''
        Change the recovery network of a network mapping.
        ByNetwork maps to a network of another site; ByAzureNetworkId
        maps to an Azure virtual network, for mappings whose primary
        is a site network or (Azure to Azure) an Azure network.
        '''
        ps = self.parameter_set_select(self.NETWORK_MAPPING_UPDATE_SETS,
                                       {'mapping' : mapping,
                                        'recovery_network_id' : recovery_network_id,
                                        'recovery_azure_network_id' : recovery_azure_network_id,
                                       })
        existing = self._mapping_from_object(mapping)
        facade = self.siterecovery_facade(vault_name=vault_name)
        if value_from_id(existing.id, SEGMENT_NETWORKS).lower() == AZURE_NETWORK.lower():
            if ps.name != 'ByAzureNetworkId':
                raise self.exc_value("Azure to Azure mapping %r takes recovery_azure_network_id" % existing.name)
            fabric_name = existing.primary_fabric_friendly_name
            if not fabric_name:
                raise self.exc_value("mapping object has no primary_fabric_friendly_name")
            network_name = AZURE_NETWORK
            recovery_fabric_name = existing.recovery_fabric_friendly_name
            target = recovery_azure_network_id
            details = AzureToAzureUpdateNetworkMappingInput(primary_network_id=existing.primary_network_id)
        else:
            fabric_name = self._name_from_id(existing.primary_network_id, SEGMENT_FABRICS, 'site recovery network')
            network_name = self._name_from_id(existing.primary_network_id, SEGMENT_NETWORKS, 'site recovery network')
            if ps.name == 'ByNetwork':
                recovery_fabric_name = self._name_from_id(recovery_network_id, SEGMENT_FABRICS, 'site recovery network')
                target = recovery_network_id
                details = VmmToVmmUpdateNetworkMappingInput()
            else:
                recovery_fabric_name = AZURE_FABRIC_NAME
                target = recovery_azure_network_id
                details = VmmToAzureUpdateNetworkMappingInput()
        self.logger.info("%s update network mapping %r in vault %s/%s recovery_network %r",
                         self.mth(), existing.name, facade.resource_group, facade.vault_name, target)
        return facade.network_mapping_update(fabric_name, network_name, existing.name, recovery_fabric_name, target, details)

    ######################################################################
    # failover

    @staticmethod
    def _failback_options(optimize, create_vm_if_not_found):
        '''
        Keyword arguments shared by the Hyper-V to Azure failback inputs
        '''
        return {'data_sync_option' : (optimize or AsrFailbackOptimize.FOR_SYNCHRONIZATION).value,
                'recovery_vm_creation_option' : 'CreateVmIfNotFound' if create_vm_if_not_found else 'NoAction',
               }

    PLANNED_FAILOVER_OPTIONAL = ('optimize', 'create_vm_if_not_found', 'primary_kek_certificate_file', 'secondary_kek_certificate_file')
    PLANNED_FAILOVER_SETS = (ParameterSet('ByProtectedItem', required=('protected_item_id', 'direction'), optional=PLANNED_FAILOVER_OPTIONAL),
                             ParameterSet('ByRecoveryPlan', required=('recovery_plan_name', 'direction'), optional=PLANNED_FAILOVER_OPTIONAL),
                            )

    @command.printable
    def planned_failover_start(self, vault_name=None, protected_item_id=None, recovery_plan_name=None, direction=None, optimize=None,
                               create_vm_if_not_found=False, primary_kek_certificate_file=None, secondary_kek_certificate_file=None):
        '''
        Planned failover of a protected item or a recovery plan.
        InMage protected items do not support planned failover.
        '''
        ps = self.parameter_set_select(self.PLANNED_FAILOVER_SETS,
                                       {'protected_item_id' : protected_item_id,
                                        'recovery_plan_name' : recovery_plan_name,
                                        'direction' : direction,
                                        'optimize' : optimize,
                                        'create_vm_if_not_found' : create_vm_if_not_found or None,
                                        'primary_kek_certificate_file' : primary_kek_certificate_file,
                                        'secondary_kek_certificate_file' : secondary_kek_certificate_file,
                                       })
        fdir = AsrFailoverDirection.coerce(direction, exc_value=self.exc_value, prefix='direction')
        to_recovery = fdir is AsrFailoverDirection.PRIMARY_TO_RECOVERY
        failback = self._failback_options(AsrFailbackOptimize.coerce_optional(optimize, exc_value=self.exc_value, prefix='optimize'),
                                          create_vm_if_not_found)
        primary_kek = certificate_file_load(primary_kek_certificate_file, 'primary_kek_certificate_file', self.exc_value)
        secondary_kek = certificate_file_load(secondary_kek_certificate_file, 'secondary_kek_certificate_file', self.exc_value)
        facade = self.siterecovery_facade(vault_name=vault_name)
        if ps.name == 'ByProtectedItem':
            fabric_name, container_name, item = self._protected_item_resolve(facade, protected_item_id)
            provider = item.replication_provider
            if provider_is(provider, PROVIDER_INMAGE) or provider_is(provider, PROVIDER_INMAGE_AZURE_V2):
                raise InvalidOperationError("planned failover of %s protected item %r is not supported" % (provider, item.name))
            details = None
            if provider_is(provider, PROVIDER_HYPERV_REPLICA_AZURE):
                if to_recovery:
                    details = HyperVReplicaAzurePlannedFailoverProviderInput(primary_kek_certificate_pfx=primary_kek,
                                                                             secondary_kek_certificate_pfx=secondary_kek)
                else:
                    details = HyperVReplicaAzureFailbackProviderInput(**failback)
            self.logger.info("%s planned failover %s of protected item %r in vault %s/%s",
                             self.mth(), fdir.value, item.name, facade.resource_group, facade.vault_name)
            return facade.protected_item_planned_failover(fabric_name, container_name, item.name, fdir, provider_specific_details=details)
        plan = self._recovery_plan_resolve(facade, recovery_plan_name)
        details = list()
        for provider in plan.replication_providers or ():
            if provider_is(provider, PROVIDER_HYPERV_REPLICA_AZURE):
                if to_recovery:
                    details.append(RecoveryPlanHyperVReplicaAzureFailoverInput(primary_kek_certificate_pfx=primary_kek,
                                                                               secondary_kek_certificate_pfx=secondary_kek))
                else:
                    details.append(RecoveryPlanHyperVReplicaAzureFailbackInput(**failback))
        self.logger.info("%s planned failover %s of recovery plan %r in vault %s/%s",
                         self.mth(), fdir.value, plan.name, facade.resource_group, facade.vault_name)
        return facade.recovery_plan_planned_failover(plan.name, fdir, provider_specific_details=details)

    def _unplanned_item_details(self, item, direction, recovery_point_id, recovery_tag, primary_kek, secondary_kek):
        '''
        Provider specific input for an unplanned failover of item, or None
        '''
        provider = item.replication_provider
        to_recovery = direction is AsrFailoverDirection.PRIMARY_TO_RECOVERY
        if provider_is(provider, PROVIDER_HYPERV_REPLICA_AZURE):
            if not to_recovery:
                return None
            return HyperVReplicaAzureFailoverProviderInput(primary_kek_certificate_pfx=primary_kek,
                                                           secondary_kek_certificate_pfx=secondary_kek,
                                                           recovery_point_id=recovery_point_id)
        if provider_is(provider, PROVIDER_INMAGE) or provider_is(provider, PROVIDER_INMAGE_AZURE_V2):
            self._multi_vm_group_check(item, 'unplanned failover')
            if not to_recovery:
                raise self.exc_value("unplanned failover of %s protected item %r must be %s" % (provider, item.name, AsrFailoverDirection.PRIMARY_TO_RECOVERY.value))
            if provider_is(provider, PROVIDER_INMAGE_AZURE_V2):
                return InMageAzureV2FailoverProviderInput(recovery_point_id=recovery_point_id)
            return InMageFailoverProviderInput(recovery_point_type=inmage_recovery_point_type(recovery_tag))
        if provider_is(provider, PROVIDER_A2A):
            return A2AFailoverProviderInput(recovery_point_id=recovery_point_id)
        return None

    @staticmethod
    def _unplanned_plan_details(plan, direction, recovery_tag, primary_kek, secondary_kek):
        '''
        Provider specific inputs for an unplanned failover of plan
        '''
        ret = list()
        to_recovery = direction is AsrFailoverDirection.PRIMARY_TO_RECOVERY
        point_type = RECOVERY_POINT_TYPES.get(recovery_tag, 'Latest')
        for provider in plan.replication_providers or ():
            if provider_is(provider, PROVIDER_HYPERV_REPLICA_AZURE):
                if to_recovery:
                    # Hyper-V has no crash consistent point type
                    hv_type = point_type if point_type != 'LatestCrashConsistent' else 'Latest'
                    ret.append(RecoveryPlanHyperVReplicaAzureFailoverInput(primary_kek_certificate_pfx=primary_kek,
                                                                           secondary_kek_certificate_pfx=secondary_kek,
                                                                           recovery_point_type=hv_type if recovery_tag else None))
            elif provider_is(provider, PROVIDER_INMAGE_AZURE_V2):
                if to_recovery:
                    ret.append(RecoveryPlanInMageAzureV2FailoverInput(recovery_point_type=point_type))
            elif provider_is(provider, PROVIDER_INMAGE):
                if not to_recovery:
                    ret.append(RecoveryPlanInMageFailoverInput(recovery_point_type=inmage_recovery_point_type(recovery_tag)))
            elif provider_is(provider, PROVIDER_A2A):
                ret.append(RecoveryPlanA2AFailoverInput(recovery_point_type=point_type))
        return ret

    UNPLANNED_FAILOVER_OPTIONAL = ('perform_source_side_action', 'recovery_tag', 'primary_kek_certificate_file', 'secondary_kek_certificate_file')
    UNPLANNED_FAILOVER_SETS = (ParameterSet('ByProtectedItem', required=('protected_item_id', 'direction'), optional=UNPLANNED_FAILOVER_OPTIONAL+('recovery_point_id',)),
                               ParameterSet('ByRecoveryPlan', required=('recovery_plan_name', 'direction'), optional=UNPLANNED_FAILOVER_OPTIONAL),
                              )

    @command.printable
    def unplanned_failover_start(self, vault_name=None, protected_item_id=None, recovery_plan_name=None, direction=None, perform_source_side_action=False,
                                 recovery_point_id=None, recovery_tag=None, primary_kek_certificate_file=None, secondary_kek_certificate_file=None):
        '''
        Unplanned failover of a protected item or a recovery plan.
        InMage protected items must be alone in their multi-VM group.
        '''
        ps = self.parameter_set_select(self.UNPLANNED_FAILOVER_SETS,
                                       {'protected_item_id' : protected_item_id,
                                        'recovery_plan_name' : recovery_plan_name,
                                        'direction' : direction,
                                        'perform_source_side_action' : perform_source_side_action or None,
                                        'recovery_point_id' : recovery_point_id,
                                        'recovery_tag' : recovery_tag,
                                        'primary_kek_certificate_file' : primary_kek_certificate_file,
                                        'secondary_kek_certificate_file' : secondary_kek_certificate_file,
                                       })
        fdir = AsrFailoverDirection.coerce(direction, exc_value=self.exc_value, prefix='direction')
        tag = AsrRecoveryTag.coerce_optional(recovery_tag, exc_value=self.exc_value, prefix='recovery_tag')
        source_site_operations = 'Required' if perform_source_side_action else 'NotRequired'
        primary_kek = certificate_file_load(primary_kek_certificate_file, 'primary_kek_certificate_file', self.exc_value)
        secondary_kek = certificate_file_load(secondary_kek_certificate_file, 'secondary_kek_certificate_file', self.exc_value)
        facade = self.siterecovery_facade(vault_name=vault_name)
        if ps.name == 'ByProtectedItem':
            fabric_name, container_name, item = self._protected_item_resolve(facade, protected_item_id)
            details = self._unplanned_item_details(item, fdir, recovery_point_id, tag, primary_kek, secondary_kek)
            self.logger.info("%s unplanned failover %s of protected item %r in vault %s/%s",
                             self.mth(), fdir.value, item.name, facade.resource_group, facade.vault_name)
            return facade.protected_item_unplanned_failover(fabric_name, container_name, item.name, fdir, source_site_operations,
                                                            provider_specific_details=details)
        plan = self._recovery_plan_resolve(facade, recovery_plan_name)
        details = self._unplanned_plan_details(plan, fdir, tag, primary_kek, secondary_kek)
        self.logger.info("%s unplanned failover %s of recovery plan %r in vault %s/%s",
                         self.mth(), fdir.value, plan.name, facade.resource_group, facade.vault_name)
        return facade.recovery_plan_unplanned_failover(plan.name, fdir, source_site_operations, provider_specific_details=details)

    FAILOVER_COMMIT_SETS = (ParameterSet('ByProtectedItem', required=('protected_item_id',)),
                            ParameterSet('ByRecoveryPlan', required=('recovery_plan_name',)),
                           )

    @command.printable
    def failover_commit(self, vault_name=None, protected_item_id=None, recovery_plan_name=None):
        '''
        Commit the failover of a protected item or a recovery plan
        '''
        ps = self.parameter_set_select(self.FAILOVER_COMMIT_SETS, {'protected_item_id' : protected_item_id, 'recovery_plan_name' : recovery_plan_name})
        facade = self.siterecovery_facade(vault_name=vault_name)
        if ps.name == 'ByProtectedItem':
            fabric_name, container_name, item = self._protected_item_resolve(facade, protected_item_id)
            self._multi_vm_group_check(item, 'failover commit')
            self.logger.info("%s commit failover of protected item %r in vault %s/%s", self.mth(), item.name, facade.resource_group, facade.vault_name)
            return facade.protected_item_commit_failover(fabric_name, container_name, item.name)
        plan = self._recovery_plan_resolve(facade, recovery_plan_name)
        self.logger.info("%s commit failover of recovery plan %r in vault %s/%s", self.mth(), plan.name, facade.resource_group, facade.vault_name)
        return facade.recovery_plan_commit_failover(plan.name)

Manager.command = command

Manager.main(__name__)
