#
# tests/test_siterecovery.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Site recovery job, event, network mapping, and failover cmdlets
'''
import json
import uuid
from unittest.mock import MagicMock

from azure.mgmt.recoveryservicessiterecovery.models import (A2AFailoverProviderInput,
                                                            AzureToAzureUpdateNetworkMappingInput,
                                                            HyperVReplicaAzureFailbackProviderInput,
                                                            HyperVReplicaAzureFailoverProviderInput,
                                                            HyperVReplicaAzurePlannedFailoverProviderInput,
                                                            InMageAzureV2FailoverProviderInput,
                                                            InMageFailoverProviderInput,
                                                            RecoveryPlanA2AFailoverInput,
                                                            RecoveryPlanHyperVReplicaAzureFailbackInput,
                                                            RecoveryPlanHyperVReplicaAzureFailoverInput,
                                                            RecoveryPlanInMageAzureV2FailoverInput,
                                                            VmmToAzureUpdateNetworkMappingInput,
                                                            VmmToVmmUpdateNetworkMappingInput,
                                                           )
import pytest

from azcmdlets.exceptions import (InvalidOperationError,
                                  ParameterSetError,
                                 )
from azcmdlets.siterecovery import Manager

from .conftest import (RESOURCE_GROUP,
                       SUBSCRIPTION_ID,
                       item_paged,
                       not_found,
                       sdk_obj,
                      )

VAULT = 'vault0'
VAULT_ID = '/subscriptions/%s/resourceGroups/%s/providers/Microsoft.RecoveryServices/vaults/%s' % (SUBSCRIPTION_ID, RESOURCE_GROUP, VAULT)
SCOPE = {'resource_group_name' : RESOURCE_GROUP, 'resource_name' : VAULT}
VNET_ID = '/subscriptions/%s/resourceGroups/%s/providers/Microsoft.Network/virtualNetworks/drvnet' % (SUBSCRIPTION_ID, RESOURCE_GROUP)

def job_sdk(name, scenario='PlannedFailover', state='Suspended'):
    return sdk_obj(name=name,
                   id=VAULT_ID + '/replicationJobs/' + name,
                   properties=sdk_obj(scenario_name=scenario, state=state, friendly_name=scenario))

def mapping_sdk(name, primary='net0'):
    return sdk_obj(name=name,
                   id=VAULT_ID + '/replicationFabrics/fab/replicationNetworks/%s/replicationNetworkMappings/%s' % (primary, name),
                   properties=sdk_obj(primary_network_friendly_name=primary, recovery_network_friendly_name='dr-' + primary, state='Paired'))

@pytest.fixture
def asr(manager_make):
    mgr = manager_make(Manager)
    client = MagicMock()
    mgr.az_client_set('siterecovery', client)
    return (mgr, client)

class TestJobs:
    '''
    job_get and job_resume
    '''
    def test_vault_required(self, asr):
        mgr, _ = asr
        with pytest.raises(ValueError):
            mgr.job_get(name='job0')

    def test_by_name(self, asr):
        mgr, client = asr
        client.replication_jobs.get.return_value = job_sdk('job0')
        res = mgr.job_get(vault_name=VAULT, name='job0')
        assert (res.name, res.scenario_name, res.state) == ('job0', 'PlannedFailover', 'Suspended')
        client.replication_jobs.get.assert_called_once_with(job_name='job0', **SCOPE)

    def test_by_name_missing(self, asr):
        mgr, client = asr
        client.replication_jobs.get.side_effect = not_found()
        assert mgr.job_get(vault_name=VAULT, name='job0') is None

    def test_by_resource_id(self, asr):
        mgr, client = asr
        client.replication_jobs.get.return_value = job_sdk('job1')
        mgr.job_get(vault_name=VAULT, resource_id=VAULT_ID + '/replicationJobs/job1')
        assert client.replication_jobs.get.call_args[1]['job_name'] == 'job1'

    def test_by_resource_id_wrong_kind(self, asr):
        mgr, _ = asr
        with pytest.raises(ValueError):
            mgr.job_get(vault_name=VAULT, resource_id=VAULT_ID + '/replicationEvents/ev0')

    def test_by_object(self, asr):
        mgr, client = asr
        client.replication_jobs.get.return_value = job_sdk('job2')
        mgr.job_get(vault_name=VAULT, job=json.dumps({'id' : VAULT_ID + '/replicationJobs/job2'}))
        assert client.replication_jobs.get.call_args[1]['job_name'] == 'job2'

    def test_by_object_without_name(self, asr):
        mgr, _ = asr
        with pytest.raises(ValueError):
            mgr.job_get(vault_name=VAULT, job='{"state": "Suspended"}')

    def test_by_param_filter(self, asr):
        mgr, client = asr
        client.replication_jobs.list.return_value = item_paged([job_sdk('a')], [job_sdk('b')])
        res = mgr.job_get(vault_name=VAULT, start_time='2020-05-01T00:00:00Z', state='inprogress', target_object_id='obj1')
        assert [x.name for x in res] == ['a', 'b']
        kwargs = client.replication_jobs.list.call_args[1]
        assert kwargs['filter'] == "startTime eq '2020-05-01T00:00:00+00:00' and targetObjectId eq 'obj1' and jobStatus eq 'InProgress'"
        assert kwargs['resource_name'] == VAULT

    def test_list_all(self, asr):
        mgr, client = asr
        client.replication_jobs.list.return_value = item_paged([])
        assert mgr.job_get(vault_name=VAULT) == []
        assert client.replication_jobs.list.call_args[1]['filter'] is None

    def test_name_and_param_conflict(self, asr):
        mgr, _ = asr
        with pytest.raises(ParameterSetError):
            mgr.job_get(vault_name=VAULT, name='job0', state='Failed')

    def test_resume(self, asr):
        mgr, client = asr
        client.replication_jobs.get.side_effect = lambda job_name, **kwargs: job_sdk(job_name)
        poller = MagicMock()
        poller.result.return_value = sdk_obj(name='job0')
        client.replication_jobs.begin_resume.return_value = poller
        res = mgr.job_resume(vault_name=VAULT, name='job0')
        assert res.name == 'job0'
        kwargs = client.replication_jobs.begin_resume.call_args[1]
        assert kwargs['job_name'] == 'job0'
        assert kwargs['resume_job_params'].properties.comments == ' '

    def test_resume_comment(self, asr):
        mgr, client = asr
        client.replication_jobs.get.side_effect = lambda job_name, **kwargs: job_sdk(job_name)
        client.replication_jobs.begin_resume.return_value.result.return_value = None
        res = mgr.job_resume(vault_name=VAULT, job='{"name": "job3"}', comment='go')
        assert res.name == 'job3'
        assert client.replication_jobs.begin_resume.call_args[1]['resume_job_params'].properties.comments == 'go'

    def test_resume_test_failover_refused(self, asr):
        mgr, client = asr
        client.replication_jobs.get.return_value = job_sdk('job0', scenario='TestFailover')
        with pytest.raises(InvalidOperationError):
            mgr.job_resume(vault_name=VAULT, name='job0')
        client.replication_jobs.begin_resume.assert_not_called()

    def test_resume_needs_job(self, asr):
        mgr, _ = asr
        with pytest.raises(ParameterSetError):
            mgr.job_resume(vault_name=VAULT, comment='go')

class TestEvents:
    '''
    event_get
    '''
    def test_by_name(self, asr):
        mgr, client = asr
        client.replication_events.get.return_value = sdk_obj(name='ev0', properties=sdk_obj(severity='Critical'))
        assert mgr.event_get(vault_name=VAULT, name='ev0').severity == 'Critical'
        client.replication_events.get.assert_called_once_with(event_name='ev0', **SCOPE)

    def test_by_resource_id(self, asr):
        mgr, client = asr
        client.replication_events.get.return_value = sdk_obj(name='ev1')
        mgr.event_get(vault_name=VAULT, resource_id=VAULT_ID + '/replicationEvents/ev1')
        assert client.replication_events.get.call_args[1]['event_name'] == 'ev1'

    def test_by_param_filter(self, asr):
        mgr, client = asr
        client.replication_events.list.return_value = item_paged([])
        mgr.event_get(vault_name=VAULT, event_type='vmhealth', severity='warning', fabric_name='fab', affected_object_friendly_name='vm0')
        kwargs = client.replication_events.list.call_args[1]
        assert kwargs['filter'] == "eventType eq 'VmHealth' and severity eq 'Warning' and fabricName eq 'fab' and affectedObjectFriendlyName eq 'vm0'"

    def test_filter_value_with_quote(self, asr):
        mgr, client = asr
        client.replication_events.list.return_value = item_paged([])
        mgr.event_get(vault_name=VAULT, affected_object_friendly_name="o'neil-vm")
        assert client.replication_events.list.call_args[1]['filter'] == "affectedObjectFriendlyName eq 'o''neil-vm'"

    def test_by_fabric_id(self, asr):
        mgr, client = asr
        client.replication_events.list.return_value = item_paged([])
        mgr.event_get(vault_name=VAULT, fabric_id=VAULT_ID + '/replicationFabrics/fab1')
        assert client.replication_events.list.call_args[1]['filter'] == "fabricName eq 'fab1'"

    def test_fabric_id_and_name(self, asr):
        mgr, _ = asr
        with pytest.raises(ParameterSetError):
            mgr.event_get(vault_name=VAULT, fabric_id=VAULT_ID + '/replicationFabrics/fab1', fabric_name='fab1')

    def test_invalid_severity(self, asr):
        mgr, _ = asr
        with pytest.raises(ValueError):
            mgr.event_get(vault_name=VAULT, severity='Dire')

class TestNetworkMappings:
    '''
    network_mapping_get
    '''
    def test_all(self, asr):
        mgr, client = asr
        client.replication_network_mappings.list.return_value = item_paged([mapping_sdk('m0'), mapping_sdk('m1')])
        res = mgr.network_mapping_get(vault_name=VAULT)
        assert [x.name for x in res] == ['m0', 'm1']
        assert res[0].recovery_network_friendly_name == 'dr-net0'

    def test_by_name(self, asr):
        mgr, client = asr
        client.replication_network_mappings.list.return_value = item_paged([mapping_sdk('m0'), mapping_sdk('M1')])
        res = mgr.network_mapping_get(vault_name=VAULT, name='m1')
        assert [x.name for x in res] == ['M1']

    def test_by_network(self, asr):
        mgr, client = asr
        client.replication_network_mappings.list_by_replication_networks.return_value = item_paged([mapping_sdk('m0')])
        mgr.network_mapping_get(vault_name=VAULT, fabric_name='fab', network_name='net0')
        kwargs = client.replication_network_mappings.list_by_replication_networks.call_args[1]
        assert (kwargs['fabric_name'], kwargs['network_name']) == ('fab', 'net0')
        client.replication_network_mappings.list.assert_not_called()

    def test_by_network_and_name(self, asr):
        mgr, client = asr
        client.replication_network_mappings.get.return_value = mapping_sdk('m0')
        mgr.network_mapping_get(vault_name=VAULT, fabric_name='fab', network_name='net0', name='m0')
        client.replication_network_mappings.get.assert_called_once_with(fabric_name='fab', network_name='net0', network_mapping_name='m0', **SCOPE)

    def test_fabric_without_network(self, asr):
        mgr, _ = asr
        with pytest.raises(ParameterSetError):
            mgr.network_mapping_get(vault_name=VAULT, fabric_name='fab')

ITEM_ID = VAULT_ID + '/replicationFabrics/fab/replicationProtectionContainers/cont/replicationProtectedItems/vm0'
ITEM_SCOPE = dict(fabric_name='fab', protection_container_name='cont', replicated_protected_item_name='vm0', **SCOPE)
PRIMARY_NETWORK_ID = VAULT_ID + '/replicationFabrics/fab/replicationNetworks/net0'

def item_sdk(provider='HyperVReplicaAzure', **details):
    return sdk_obj(name='vm0',
                   id=ITEM_ID,
                   properties=sdk_obj(friendly_name='vm0', protection_state='Protected',
                                      provider_specific_details=sdk_obj(instance_type=provider, **details)))

def plan_sdk(*providers):
    return sdk_obj(name='plan0',
                   id=VAULT_ID + '/replicationRecoveryPlans/plan0',
                   properties=sdk_obj(friendly_name='plan0', replication_providers=list(providers)))

def mapping_json(**kwargs):
    data = {'name' : 'm0',
            'id' : PRIMARY_NETWORK_ID + '/replicationNetworkMappings/m0',
            'primary_network_id' : PRIMARY_NETWORK_ID,
           }
    data.update(kwargs)
    return json.dumps(data)

class TestNetworkMappingUpdate:
    '''
    network_mapping_update
    '''
    def test_to_site_network(self, asr):
        mgr, client = asr
        client.replication_network_mappings.begin_update.return_value.result.return_value = mapping_sdk('m0')
        res = mgr.network_mapping_update(vault_name=VAULT, mapping=mapping_json(), recovery_network_id=VAULT_ID + '/replicationFabrics/drfab/replicationNetworks/drnet')
        assert res.name == 'm0'
        kwargs = client.replication_network_mappings.begin_update.call_args[1]
        assert (kwargs['fabric_name'], kwargs['network_name'], kwargs['network_mapping_name']) == ('fab', 'net0', 'm0')
        assert kwargs['resource_name'] == VAULT
        props = kwargs['input'].properties
        assert props.recovery_fabric_name == 'drfab'
        assert props.recovery_network_id == VAULT_ID + '/replicationFabrics/drfab/replicationNetworks/drnet'
        assert isinstance(props.fabric_specific_details, VmmToVmmUpdateNetworkMappingInput)

    def test_to_azure_network(self, asr):
        mgr, client = asr
        client.replication_network_mappings.begin_update.return_value.result.return_value = mapping_sdk('m0')
        mgr.network_mapping_update(vault_name=VAULT, mapping=mapping_json(), recovery_azure_network_id=VNET_ID)
        kwargs = client.replication_network_mappings.begin_update.call_args[1]
        assert (kwargs['fabric_name'], kwargs['network_name']) == ('fab', 'net0')
        props = kwargs['input'].properties
        assert (props.recovery_fabric_name, props.recovery_network_id) == ('Microsoft Azure', VNET_ID)
        assert isinstance(props.fabric_specific_details, VmmToAzureUpdateNetworkMappingInput)

    def test_azure_to_azure(self, asr):
        mgr, client = asr
        client.replication_network_mappings.begin_update.return_value.result.return_value = mapping_sdk('m1')
        mapping = mapping_json(name='m1',
                               id=VAULT_ID + '/replicationFabrics/eastus/replicationNetworks/azureNetwork/replicationNetworkMappings/m1',
                               primary_network_id='/subscriptions/%s/resourceGroups/rg/providers/Microsoft.Network/virtualNetworks/pvnet' % SUBSCRIPTION_ID,
                               primary_fabric_friendly_name='eastus',
                               recovery_fabric_friendly_name='westus')
        mgr.network_mapping_update(vault_name=VAULT, mapping=mapping, recovery_azure_network_id=VNET_ID)
        kwargs = client.replication_network_mappings.begin_update.call_args[1]
        assert (kwargs['fabric_name'], kwargs['network_name'], kwargs['network_mapping_name']) == ('eastus', 'azureNetwork', 'm1')
        props = kwargs['input'].properties
        assert (props.recovery_fabric_name, props.recovery_network_id) == ('westus', VNET_ID)
        assert isinstance(props.fabric_specific_details, AzureToAzureUpdateNetworkMappingInput)
        assert props.fabric_specific_details.primary_network_id.endswith('/virtualNetworks/pvnet')

    def test_azure_to_azure_needs_azure_network(self, asr):
        mgr, client = asr
        mapping = mapping_json(id=VAULT_ID + '/replicationFabrics/eastus/replicationNetworks/azureNetwork/replicationNetworkMappings/m0',
                               primary_fabric_friendly_name='eastus')
        with pytest.raises(ValueError):
            mgr.network_mapping_update(vault_name=VAULT, mapping=mapping, recovery_network_id=PRIMARY_NETWORK_ID)
        client.replication_network_mappings.begin_update.assert_not_called()

    def test_empty_result_reads_back(self, asr):
        mgr, client = asr
        client.replication_network_mappings.begin_update.return_value.result.return_value = None
        client.replication_network_mappings.get.return_value = mapping_sdk('m0')
        res = mgr.network_mapping_update(vault_name=VAULT, mapping=mapping_json(), recovery_azure_network_id=VNET_ID)
        assert res.name == 'm0'
        client.replication_network_mappings.get.assert_called_once_with(fabric_name='fab', network_name='net0', network_mapping_name='m0', **SCOPE)

    def test_needs_recovery_network(self, asr):
        mgr, _ = asr
        with pytest.raises(ParameterSetError):
            mgr.network_mapping_update(vault_name=VAULT, mapping=mapping_json())

    def test_both_recovery_networks(self, asr):
        mgr, _ = asr
        with pytest.raises(ParameterSetError):
            mgr.network_mapping_update(vault_name=VAULT, mapping=mapping_json(), recovery_network_id=PRIMARY_NETWORK_ID, recovery_azure_network_id=VNET_ID)

class TestPlannedFailover:
    '''
    planned_failover_start
    '''
    def test_hyperv_to_azure(self, asr, tmp_path):
        mgr, client = asr
        cert = tmp_path / 'primary.pfx'
        cert.write_bytes(b'\x01\x02')
        client.replication_protected_items.get.return_value = item_sdk()
        client.replication_protected_items.begin_planned_failover.return_value.result.return_value = item_sdk()
        res = mgr.planned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='primarytorecovery', primary_kek_certificate_file=str(cert))
        assert res.name == 'vm0'
        assert res.replication_provider == 'HyperVReplicaAzure'
        client.replication_protected_items.get.assert_called_once_with(**ITEM_SCOPE)
        kwargs = client.replication_protected_items.begin_planned_failover.call_args[1]
        assert kwargs['replicated_protected_item_name'] == 'vm0'
        assert kwargs['protection_container_name'] == 'cont'
        props = kwargs['failover_input'].properties
        assert props.failover_direction == 'PrimaryToRecovery'
        assert isinstance(props.provider_specific_details, HyperVReplicaAzurePlannedFailoverProviderInput)
        assert props.provider_specific_details.primary_kek_certificate_pfx == 'AQI='
        assert props.provider_specific_details.secondary_kek_certificate_pfx is None

    def test_failback_defaults(self, asr):
        mgr, client = asr
        client.replication_protected_items.get.return_value = item_sdk()
        mgr.planned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='RecoveryToPrimary')
        details = client.replication_protected_items.begin_planned_failover.call_args[1]['failover_input'].properties.provider_specific_details
        assert isinstance(details, HyperVReplicaAzureFailbackProviderInput)
        assert (details.data_sync_option, details.recovery_vm_creation_option) == ('ForSynchronization', 'NoAction')

    def test_failback_options(self, asr):
        mgr, client = asr
        client.replication_protected_items.get.return_value = item_sdk()
        mgr.planned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='RecoveryToPrimary', optimize='fordowntime', create_vm_if_not_found=True)
        details = client.replication_protected_items.begin_planned_failover.call_args[1]['failover_input'].properties.provider_specific_details
        assert (details.data_sync_option, details.recovery_vm_creation_option) == ('ForDownTime', 'CreateVmIfNotFound')

    def test_create_vm_false_is_not_given(self, asr):
        mgr, client = asr
        client.replication_recovery_plans.get.return_value = plan_sdk('A2A')
        mgr.planned_failover_start(vault_name=VAULT, recovery_plan_name='plan0', direction='PrimaryToRecovery', create_vm_if_not_found=False)
        assert client.replication_recovery_plans.begin_planned_failover.call_args[1]['recovery_plan_name'] == 'plan0'

    def test_other_provider_has_no_details(self, asr):
        mgr, client = asr
        client.replication_protected_items.get.return_value = item_sdk(provider='A2A')
        mgr.planned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='PrimaryToRecovery')
        props = client.replication_protected_items.begin_planned_failover.call_args[1]['failover_input'].properties
        assert props.provider_specific_details is None

    @pytest.mark.parametrize('provider', ['InMage', 'InMageAzureV2'])
    def test_inmage_refused(self, asr, provider):
        mgr, client = asr
        client.replication_protected_items.get.return_value = item_sdk(provider=provider)
        with pytest.raises(InvalidOperationError):
            mgr.planned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='PrimaryToRecovery')
        client.replication_protected_items.begin_planned_failover.assert_not_called()

    def test_direction_required(self, asr):
        mgr, _ = asr
        with pytest.raises(ParameterSetError):
            mgr.planned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID)

    def test_invalid_direction(self, asr):
        mgr, client = asr
        with pytest.raises(ValueError):
            mgr.planned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='Sideways')
        client.replication_protected_items.get.assert_not_called()

    def test_item_missing(self, asr):
        mgr, client = asr
        client.replication_protected_items.get.side_effect = not_found()
        with pytest.raises(ValueError):
            mgr.planned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='PrimaryToRecovery')
        client.replication_protected_items.begin_planned_failover.assert_not_called()

    def test_item_id_wrong_kind(self, asr):
        mgr, _ = asr
        with pytest.raises(ValueError):
            mgr.planned_failover_start(vault_name=VAULT, protected_item_id=VAULT_ID + '/replicationJobs/job0', direction='PrimaryToRecovery')

    def test_recovery_plan_failback(self, asr):
        mgr, client = asr
        client.replication_recovery_plans.get.return_value = plan_sdk('HyperVReplicaAzure', 'A2A')
        client.replication_recovery_plans.begin_planned_failover.return_value.result.return_value = plan_sdk('HyperVReplicaAzure', 'A2A')
        res = mgr.planned_failover_start(vault_name=VAULT, recovery_plan_name='plan0', direction='RecoveryToPrimary', optimize='ForDownTime')
        assert res.name == 'plan0'
        client.replication_recovery_plans.get.assert_called_once_with(recovery_plan_name='plan0', **SCOPE)
        props = client.replication_recovery_plans.begin_planned_failover.call_args[1]['input'].properties
        assert props.failover_direction == 'RecoveryToPrimary'
        assert len(props.provider_specific_details) == 1
        assert isinstance(props.provider_specific_details[0], RecoveryPlanHyperVReplicaAzureFailbackInput)
        assert props.provider_specific_details[0].data_sync_option == 'ForDownTime'

    def test_recovery_plan_missing(self, asr):
        mgr, client = asr
        client.replication_recovery_plans.get.return_value = None
        with pytest.raises(ValueError):
            mgr.planned_failover_start(vault_name=VAULT, recovery_plan_name='plan0', direction='PrimaryToRecovery')
        client.replication_recovery_plans.begin_planned_failover.assert_not_called()

class TestUnplannedFailover:
    '''
    unplanned_failover_start
    '''
    def test_a2a_recovery_point(self, asr):
        mgr, client = asr
        client.replication_protected_items.get.return_value = item_sdk(provider='A2A')
        mgr.unplanned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='PrimaryToRecovery', recovery_point_id='rp1', perform_source_side_action=True)
        kwargs = client.replication_protected_items.begin_unplanned_failover.call_args[1]
        assert kwargs['fabric_name'] == 'fab'
        props = kwargs['failover_input'].properties
        assert props.source_site_operations == 'Required'
        assert isinstance(props.provider_specific_details, A2AFailoverProviderInput)
        assert props.provider_specific_details.recovery_point_id == 'rp1'

    def test_source_side_not_required_by_default(self, asr):
        mgr, client = asr
        client.replication_protected_items.get.return_value = item_sdk()
        mgr.unplanned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='PrimaryToRecovery', perform_source_side_action=False)
        props = client.replication_protected_items.begin_unplanned_failover.call_args[1]['failover_input'].properties
        assert props.source_site_operations == 'NotRequired'
        assert isinstance(props.provider_specific_details, HyperVReplicaAzureFailoverProviderInput)

    def test_hyperv_failback_has_no_details(self, asr):
        mgr, client = asr
        client.replication_protected_items.get.return_value = item_sdk()
        mgr.unplanned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='RecoveryToPrimary')
        props = client.replication_protected_items.begin_unplanned_failover.call_args[1]['failover_input'].properties
        assert props.failover_direction == 'RecoveryToPrimary'
        assert props.provider_specific_details is None

    def test_inmage_own_group(self, asr):
        mgr, client = asr
        group = str(uuid.uuid4())
        client.replication_protected_items.get.return_value = item_sdk(provider='InMageAzureV2', multi_vm_group_name=group, multi_vm_group_id=group)
        mgr.unplanned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='PrimaryToRecovery', recovery_point_id='rp2')
        details = client.replication_protected_items.begin_unplanned_failover.call_args[1]['failover_input'].properties.provider_specific_details
        assert isinstance(details, InMageAzureV2FailoverProviderInput)
        assert details.recovery_point_id == 'rp2'

    def test_inmage_tagged_point(self, asr):
        mgr, client = asr
        group = str(uuid.uuid4())
        client.replication_protected_items.get.return_value = item_sdk(provider='InMage', multi_vm_group_name=group, multi_vm_group_id=group)
        mgr.unplanned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='PrimaryToRecovery', recovery_tag='LatestAvailableApplicationConsistent')
        details = client.replication_protected_items.begin_unplanned_failover.call_args[1]['failover_input'].properties.provider_specific_details
        assert isinstance(details, InMageFailoverProviderInput)
        assert details.recovery_point_type == 'LatestTag'

    @pytest.mark.parametrize('group_name,group_id', [('group1', 'abc'),
                                                     ('00000000-0000-0000-0000-000000000000', '00000000-0000-0000-0000-000000000000'),
                                                     ('8e4f2bf5-43a9-4bb4-8c5b-8e1b1f0d7a11', '1b2e6c1a-5d0f-4f2d-9a4b-7b6e0d4f3c22'),
                                                    ])
    def test_inmage_shared_group_refused(self, asr, group_name, group_id):
        mgr, client = asr
        client.replication_protected_items.get.return_value = item_sdk(provider='InMageAzureV2', multi_vm_group_name=group_name, multi_vm_group_id=group_id)
        with pytest.raises(InvalidOperationError):
            mgr.unplanned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='PrimaryToRecovery')
        client.replication_protected_items.begin_unplanned_failover.assert_not_called()

    def test_inmage_wrong_direction(self, asr):
        mgr, client = asr
        group = str(uuid.uuid4())
        client.replication_protected_items.get.return_value = item_sdk(provider='InMageAzureV2', multi_vm_group_name=group, multi_vm_group_id=group)
        with pytest.raises(ValueError):
            mgr.unplanned_failover_start(vault_name=VAULT, protected_item_id=ITEM_ID, direction='RecoveryToPrimary')
        client.replication_protected_items.begin_unplanned_failover.assert_not_called()

    def test_recovery_plan_tag(self, asr):
        mgr, client = asr
        client.replication_recovery_plans.get.return_value = plan_sdk('HyperVReplicaAzure', 'InMageAzureV2', 'A2A')
        mgr.unplanned_failover_start(vault_name=VAULT, recovery_plan_name='plan0', direction='PrimaryToRecovery', recovery_tag='latestavailablecrashconsistent')
        props = client.replication_recovery_plans.begin_unplanned_failover.call_args[1]['input'].properties
        assert [type(x) for x in props.provider_specific_details] == [RecoveryPlanHyperVReplicaAzureFailoverInput,
                                                                      RecoveryPlanInMageAzureV2FailoverInput,
                                                                      RecoveryPlanA2AFailoverInput]
        assert [x.recovery_point_type for x in props.provider_specific_details] == ['Latest', 'LatestCrashConsistent', 'LatestCrashConsistent']

    def test_recovery_plan_without_tag(self, asr):
        mgr, client = asr
        client.replication_recovery_plans.get.return_value = plan_sdk('HyperVReplicaAzure', 'InMage')
        mgr.unplanned_failover_start(vault_name=VAULT, recovery_plan_name='plan0', direction='PrimaryToRecovery')
        props = client.replication_recovery_plans.begin_unplanned_failover.call_args[1]['input'].properties
        assert len(props.provider_specific_details) == 1
        assert props.provider_specific_details[0].recovery_point_type is None

    def test_recovery_point_only_for_items(self, asr):
        mgr, _ = asr
        with pytest.raises(ParameterSetError):
            mgr.unplanned_failover_start(vault_name=VAULT, recovery_plan_name='plan0', direction='PrimaryToRecovery', recovery_point_id='rp1')

    def test_invalid_recovery_tag(self, asr):
        mgr, _ = asr
        with pytest.raises(ValueError):
            mgr.unplanned_failover_start(vault_name=VAULT, recovery_plan_name='plan0', direction='PrimaryToRecovery', recovery_tag='Oldest')

class TestFailoverCommit:
    '''
    failover_commit
    '''
    def test_protected_item(self, asr):
        mgr, client = asr
        client.replication_protected_items.get.return_value = item_sdk()
        client.replication_protected_items.begin_failover_commit.return_value.result.return_value = None
        res = mgr.failover_commit(vault_name=VAULT, protected_item_id=ITEM_ID)
        assert res.name == 'vm0'
        client.replication_protected_items.begin_failover_commit.assert_called_once_with(**ITEM_SCOPE)
        assert client.replication_protected_items.get.call_count == 2

    def test_shared_group_refused(self, asr):
        mgr, client = asr
        client.replication_protected_items.get.return_value = item_sdk(provider='InMage', multi_vm_group_name='group1', multi_vm_group_id='g1')
        with pytest.raises(InvalidOperationError):
            mgr.failover_commit(vault_name=VAULT, protected_item_id=ITEM_ID)
        client.replication_protected_items.begin_failover_commit.assert_not_called()

    def test_recovery_plan(self, asr):
        mgr, client = asr
        client.replication_recovery_plans.get.return_value = plan_sdk('A2A')
        client.replication_recovery_plans.begin_failover_commit.return_value.result.return_value = plan_sdk('A2A')
        res = mgr.failover_commit(vault_name=VAULT, recovery_plan_name='plan0')
        assert res.replication_providers == ['A2A']
        client.replication_recovery_plans.begin_failover_commit.assert_called_once_with(recovery_plan_name='plan0', **SCOPE)

    def test_item_or_plan(self, asr):
        mgr, _ = asr
        with pytest.raises(ParameterSetError):
            mgr.failover_commit(vault_name=VAULT, protected_item_id=ITEM_ID, recovery_plan_name='plan0')
