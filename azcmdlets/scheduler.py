#!/usr/bin/env python3
#
# azcmdlets/scheduler.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Scheduler cmdlets: job collections and jobs.

azure-mgmt-scheduler is an msrest (track1) client. ServiceManager
hands it the credential through AzCredentialAdapter, and its Paged
results go through the same page_fetch() as everything else.

Job update reads the existing job, merges the given changes onto it,
and writes the result back with jobs.patch.
'''
from azure.mgmt.scheduler import SchedulerManagementClient
from azure.mgmt.scheduler.models import (BasicAuthentication,
                                         ClientCertAuthentication,
                                         HttpRequest,
                                         JobAction,
                                         JobErrorAction,
                                         JobProperties,
                                         JobRecurrence,
                                         OAuthAuthentication,
                                         ServiceBusAuthentication,
                                         ServiceBusQueueMessage,
                                         ServiceBusTopicMessage,
                                         StorageQueueMessage,
                                        )

import azcmdlets.base_defaults
from azcmdlets.btypes import (SchedulerJobActionType,
                              SchedulerJobState,
                              SchedulerRecurrenceFrequency,
                             )
from azcmdlets.cmdlet import (PresentationModel,
                              ServiceFacade,
                              ServiceManager,
                             )
from azcmdlets.command import Command
from azcmdlets.util import (datetime_normalize,
                            json_or_file_load,
                            odata_eq,
                           )

HTTP_ACTION_TYPES = (SchedulerJobActionType.HTTP, SchedulerJobActionType.HTTPS)

HTTP_METHOD_DEFAULT = 'GET'
SERVICE_BUS_TRANSPORT_TYPE_DEFAULT = 'NetMessaging'
SERVICE_BUS_AUTHENTICATION_TYPE = 'SharedAccessKey'

# Keys of an action parameter dict. The same keys describe the
# action and the error action.
ACTION_PARAM_KEYS = ('type',
                     'uri',
                     'method',
                     'body',
                     'headers',
                     'authentication',
                     'storage_account',
                     'queue_name',
                     'sas_token',
                     'message',
                     'namespace',
                     'topic_path',
                     'transport_type',
                     'sas_key_name',
                     'sas_key',
                    )

def _enum_value(value):
    '''
    SDK enum fields may hold a str or an enum
    '''
    return getattr(value, 'value', value)

def action_type_of(action):
    '''
    Return the SchedulerJobActionType of an SDK JobAction/JobErrorAction, or None
    '''
    if (action is None) or (not action.type):
        return None
    return SchedulerJobActionType.coerce(_enum_value(action.type))

def action_types_compatible(existing_type, new_type):
    '''
    Return whether an action of existing_type may be merged with
    new parameters of new_type rather than replaced.
    Http and Https are interchangeable.
    '''
    if existing_type is None:
        return False
    if existing_type == new_type:
        return True
    return (existing_type in HTTP_ACTION_TYPES) and (new_type in HTTP_ACTION_TYPES)

def action_params_normalize(params, exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    params is a dict with keys from ACTION_PARAM_KEYS, or None.
    Drop keys that are not given. Return None if nothing is given.
    '''
    if not params:
        return None
    unknown = set(params.keys()) - set(ACTION_PARAM_KEYS)
    if unknown:
        raise exc_value("unknown job action parameters %s" % ', '.join(sorted(unknown)))
    ret = {k : v for k, v in params.items() if v not in (None, '')}
    if not ret:
        return None
    if 'type' in ret:
        ret['type'] = SchedulerJobActionType.coerce(ret['type'], exc_value=exc_value, prefix='action type')
    return ret

def http_authentication_build(data, exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    data is a dict with 'type' of Basic, ClientCertificate, or ActiveDirectoryOAuth
    plus the matching credential keys. Returns an SDK HttpAuthentication or None.
    '''
    if not data:
        return None
    if not isinstance(data, dict):
        raise exc_value("job action authentication must be a JSON object")
    auth_type = (data.get('type', None) or '').lower()
    if auth_type == 'basic':
        return BasicAuthentication(username=data.get('username', None), password=data.get('password', None))
    if auth_type == 'clientcertificate':
        return ClientCertAuthentication(pfx=data.get('pfx', None), password=data.get('password', None))
    if auth_type == 'activedirectoryoauth':
        return OAuthAuthentication(tenant=data.get('tenant', None),
                                   audience=data.get('audience', None),
                                   client_id=data.get('client_id', None),
                                   secret=data.get('secret', None))
    raise exc_value("unknown job action authentication type %r" % data.get('type', None))

def _required(params, keys, action_type, exc_value):
    '''
    Raise unless every key of keys is in params
    '''
    missing = [k for k in keys if k not in params]
    if missing:
        raise exc_value("%s job action requires %s" % (action_type.value, ', '.join(missing)))

def _service_bus_authentication(params, existing=None):
    '''
    Return ServiceBusAuthentication with given keys applied over existing
    '''
    if not (('sas_key_name' in params) or ('sas_key' in params)):
        return existing
    ret = existing or ServiceBusAuthentication(type=SERVICE_BUS_AUTHENTICATION_TYPE)
    ret.sas_key_name = params.get('sas_key_name', ret.sas_key_name)
    ret.sas_key = params.get('sas_key', ret.sas_key)
    return ret

def job_action_build(params, kls, exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Build a new kls (JobAction or JobErrorAction) from normalized params
    '''
    action_type = params.get('type', None)
    if action_type is None:
        raise exc_value("job action type not specified")
    ret = kls(type=action_type.value)
    if action_type in HTTP_ACTION_TYPES:
        _required(params, ('uri',), action_type, exc_value)
        ret.request = HttpRequest(uri=params['uri'],
                                  method=params.get('method', HTTP_METHOD_DEFAULT),
                                  body=params.get('body', None),
                                  headers=params.get('headers', None),
                                  authentication=http_authentication_build(params.get('authentication', None), exc_value=exc_value))
    elif action_type == SchedulerJobActionType.STORAGE_QUEUE:
        _required(params, ('storage_account', 'queue_name', 'sas_token', 'message'), action_type, exc_value)
        ret.queue_message = StorageQueueMessage(storage_account=params['storage_account'],
                                                queue_name=params['queue_name'],
                                                sas_token=params['sas_token'],
                                                message=params['message'])
    else:
        target = 'queue_name' if action_type == SchedulerJobActionType.SERVICE_BUS_QUEUE else 'topic_path'
        _required(params, ('namespace', 'message', target), action_type, exc_value)
        kwargs = {'namespace' : params['namespace'],
                  'message' : params['message'],
                  'transport_type' : params.get('transport_type', SERVICE_BUS_TRANSPORT_TYPE_DEFAULT),
                  'authentication' : _service_bus_authentication(params),
                  target : params[target],
                 }
        if action_type == SchedulerJobActionType.SERVICE_BUS_QUEUE:
            ret.service_bus_queue_message = ServiceBusQueueMessage(**kwargs)
        else:
            ret.service_bus_topic_message = ServiceBusTopicMessage(**kwargs)
    return ret

def job_action_merge(existing, params, kls, exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Merge normalized params onto the SDK action existing (JobAction or
    JobErrorAction, or None). A compatible type updates existing in place;
    otherwise a new kls is built from params. No params leaves existing alone.
    '''
    if not params:
        return existing
    existing_type = action_type_of(existing)
    params = dict(params)
    params.setdefault('type', existing_type)
    new_type = params['type']
    if not action_types_compatible(existing_type, new_type):
        return job_action_build(params, kls, exc_value=exc_value)

    if new_type in HTTP_ACTION_TYPES:
        request = existing.request or HttpRequest()
        if 'uri' in params:
            request.uri = params['uri']
        existing.type = new_type.value
        request.method = params.get('method', request.method)
        request.body = params.get('body', request.body)
        request.headers = params.get('headers', request.headers)
        # The service does not return secrets, so existing authentication
        # cannot be written back. It must be given again to be kept.
        request.authentication = http_authentication_build(params.get('authentication', None), exc_value=exc_value)
        existing.request = request
    elif new_type == SchedulerJobActionType.STORAGE_QUEUE:
        msg = existing.queue_message or StorageQueueMessage()
        msg.storage_account = params.get('storage_account', msg.storage_account)
        msg.queue_name = params.get('queue_name', msg.queue_name)
        msg.sas_token = params.get('sas_token', msg.sas_token)
        msg.message = params.get('message', msg.message)
        existing.queue_message = msg
    else:
        if new_type == SchedulerJobActionType.SERVICE_BUS_QUEUE:
            msg = existing.service_bus_queue_message or ServiceBusQueueMessage()
            msg.queue_name = params.get('queue_name', msg.queue_name)
            existing.service_bus_queue_message = msg
        else:
            msg = existing.service_bus_topic_message or ServiceBusTopicMessage()
            msg.topic_path = params.get('topic_path', msg.topic_path)
            existing.service_bus_topic_message = msg
        msg.namespace = params.get('namespace', msg.namespace)
        msg.message = params.get('message', msg.message)
        msg.transport_type = params.get('transport_type', msg.transport_type)
        msg.authentication = _service_bus_authentication(params, existing=msg.authentication)
    return existing

def job_recurrence_merge(existing, frequency=None, interval=None, count=None, end_time=None):
    '''
    Merge the given recurrence fields onto the SDK JobRecurrence existing.
    Fields that are None keep their existing values.
    '''
    if (frequency is None) and (interval is None) and (count is None) and (end_time is None):
        return existing
    ret = existing or JobRecurrence()
    if frequency is not None:
        ret.frequency = frequency
    if interval is not None:
        ret.interval = interval
    if count is not None:
        ret.count = count
    if end_time is not None:
        ret.end_time = end_time
    return ret

def job_properties_merge(existing, action=None, error_action=None, start_time=None, state=None, recurrence=None,
                         exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    existing is the JobProperties of the job being updated.
    action and error_action are normalized parameter dicts (or None).
    recurrence is a dict of job_recurrence_merge() kwargs (or None).
    Returns new JobProperties.
    '''
    existing = existing or JobProperties()
    new_action = job_action_merge(existing.action, action, JobAction, exc_value=exc_value)
    if new_action is None:
        raise exc_value("job has no action")
    new_action.error_action = job_action_merge(getattr(existing.action, 'error_action', None), error_action, JobErrorAction, exc_value=exc_value)
    return JobProperties(action=new_action,
                         recurrence=job_recurrence_merge(existing.recurrence, **(recurrence or dict())),
                         start_time=start_time or existing.start_time,
                         state=state or _enum_value(existing.state))

######################################################################
# presentation models

class JobCollectionModel(PresentationModel):
    '''
    azure.mgmt.scheduler.models.JobCollectionDefinition
    '''
    FIELDS = ('name',
              'id',
              'location',
              ('state', 'properties.state'),
              ('sku', 'properties.sku.name'),
              ('max_job_count', 'properties.quota.max_job_count'),
              ('max_recurrence_frequency', 'properties.quota.max_recurrence.frequency'),
              ('max_recurrence_interval', 'properties.quota.max_recurrence.interval'),
              'tags',
             )
    TABLE_COLUMNS = ('name', 'location', 'state', 'sku')

class JobModel(PresentationModel):
    '''
    azure.mgmt.scheduler.models.JobDefinition
    '''
    FIELDS = ('name',
              'id',
              ('state', 'properties.state'),
              ('start_time', 'properties.start_time'),
              ('action_type', 'properties.action.type'),
              ('uri', 'properties.action.request.uri'),
              ('method', 'properties.action.request.method'),
              ('storage_account', 'properties.action.queue_message.storage_account'),
              ('storage_queue_name', 'properties.action.queue_message.queue_name'),
              ('service_bus_queue_name', 'properties.action.service_bus_queue_message.queue_name'),
              ('service_bus_topic_path', 'properties.action.service_bus_topic_message.topic_path'),
              ('error_action_type', 'properties.action.error_action.type'),
              ('frequency', 'properties.recurrence.frequency'),
              ('interval', 'properties.recurrence.interval'),
              ('execution_count', 'properties.recurrence.count'),
              ('end_time', 'properties.recurrence.end_time'),
              ('executions', 'properties.status.execution_count'),
              ('failures', 'properties.status.failure_count'),
              ('last_execution_time', 'properties.status.last_execution_time'),
              ('next_execution_time', 'properties.status.next_execution_time'),
             )
    TABLE_COLUMNS = ('name', 'state', 'action_type', 'next_execution_time')

    @classmethod
    def from_sdk(cls, obj):
        ret = super().from_sdk(obj)
        if ret is not None:
            for name in ('state', 'action_type', 'error_action_type', 'frequency'):
                setattr(ret, name, _enum_value(getattr(ret, name)))
        return ret

######################################################################
# facade

class SchedulerFacade(ServiceFacade):
    '''
    self.client is azure.mgmt.scheduler.SchedulerManagementClient
    '''
    def job_collection_get(self, resource_group, name):
        '''
        Return JobCollectionModel or None
        '''
        return JobCollectionModel.from_sdk(self._cw_get(self.client.job_collections.get, resource_group, name))

    def _job_collection_page(self, resource_group=None, next_link=None):
        '''
        One page of job collections
        '''
        if resource_group:
            return self._cw_page(self.client.job_collections.list_by_resource_group, resource_group, next_link=next_link, transform=JobCollectionModel.from_sdk)
        return self._cw_page(self.client.job_collections.list_by_subscription, next_link=next_link, transform=JobCollectionModel.from_sdk)

    def job_collection_list(self, resource_group=None, next_link=None, walk=True):
        '''
        List job collections in the resource group or subscription
        '''
        return self._pages(self._job_collection_page, resource_group=resource_group, next_link=next_link, walk=walk)

    def job_get(self, resource_group, job_collection_name, job_name):
        '''
        Return JobModel or None
        '''
        return JobModel.from_sdk(self._cw_get(self.client.jobs.get, resource_group, job_collection_name, job_name))

    def _job_page(self, resource_group, job_collection_name, state=None, next_link=None):
        '''
        One page of jobs, optionally only those in state
        '''
        kwargs = dict()
        if state:
            kwargs['filter'] = odata_eq('state', state)
        return self._cw_page(self.client.jobs.list, resource_group, job_collection_name, next_link=next_link, transform=JobModel.from_sdk, **kwargs)

    def job_list(self, resource_group, job_collection_name, state=None, next_link=None, walk=True):
        '''
        List jobs in a collection
        '''
        return self._pages(self._job_page, resource_group, job_collection_name, state=state, next_link=next_link, walk=walk)

    def job_patch(self, resource_group, job_collection_name, job_name, job):
        '''
        Patch the job with the SDK JobDefinition job
        '''
        return JobModel.from_sdk(self._cw_call(self.client.jobs.patch, resource_group, job_collection_name, job_name, job))

    def job_delete(self, resource_group, job_collection_name, job_name):
        '''
        Delete a job
        '''
        self._cw_call(self.client.jobs.delete, resource_group, job_collection_name, job_name)

    def job_run(self, resource_group, job_collection_name, job_name):
        '''
        Run a job now
        '''
        self._cw_call(self.client.jobs.run, resource_group, job_collection_name, job_name)

######################################################################
# cmdlets

command = Command()

class Manager(ServiceManager):
    '''
    Scheduler cmdlets. The resource group comes from --resource_group.
    '''
    ACTION_ARGS = (('job_collection_name', {'help' : 'job collection name'}),
                   ('job_name', {'help' : 'job name'}),
                   ('job_state', {'help' : 'job state (%s)' % ', '.join(SchedulerJobState.values(sort=False))}),
                   ('start_time', {'help' : 'job start time (ISO 8601)'}),
                   ('action_type', {'help' : 'job action type (%s)' % ', '.join(SchedulerJobActionType.values(sort=False))}),
                   ('uri', {'help' : 'HTTP(S) action URI'}),
                   ('method', {'help' : 'HTTP(S) action method'}),
                   ('request_body', {'help' : 'HTTP(S) action request body'}),
                   ('headers', {'help' : 'HTTP(S) action headers as JSON'}),
                   ('http_authentication', {'help' : 'HTTP(S) action authentication as JSON ("type" is Basic, ClientCertificate, or ActiveDirectoryOAuth)'}),
                   ('storage_account', {'help' : 'storage queue action account'}),
                   ('storage_queue_name', {'help' : 'storage queue action queue'}),
                   ('storage_sas_token', {'help' : 'storage queue action SAS token'}),
                   ('storage_queue_message', {'help' : 'storage queue action message'}),
                   ('service_bus_namespace', {'help' : 'service bus action namespace'}),
                   ('service_bus_queue_name', {'help' : 'service bus queue action queue'}),
                   ('service_bus_topic_path', {'help' : 'service bus topic action topic'}),
                   ('service_bus_message', {'help' : 'service bus action message'}),
                   ('service_bus_transport_type', {'help' : 'service bus action transport type'}),
                   ('service_bus_sas_key_name', {'help' : 'service bus action SAS key name'}),
                   ('service_bus_sas_key', {'help' : 'service bus action SAS key'}),
                   ('error_action', {'help' : 'error action as JSON or a path to a JSON file; keys are %s' % ', '.join(ACTION_PARAM_KEYS)}),
                   ('frequency', {'help' : 'recurrence frequency (%s)' % ', '.join(SchedulerRecurrenceFrequency.values(sort=False))}),
                   ('interval', {'type' : int, 'help' : 'recurrence interval'}),
                   ('execution_count', {'type' : int, 'help' : 'recurrence count'}),
                   ('end_time', {'help' : 'recurrence end time (ISO 8601)'}),
                  )

    def scheduler_facade(self):
        '''
        Return SchedulerFacade
        '''
        client = self._az_client_gen_property('scheduler', SchedulerManagementClient)
        return SchedulerFacade(client, self.logger, exc_value=self.exc_value)

    def _job_scope(self, job_collection_name, job_name=None, job_name_required=True):
        '''
        Return (resource_group, job_collection_name, job_name) with required parts checked
        '''
        resource_group = self.resource_group_effective(self.resource_group, exc_value=self.exc_value)
        if not job_collection_name:
            raise self.exc_value("'job_collection_name' not specified")
        if job_name_required and (not job_name):
            raise self.exc_value("'job_name' not specified")
        return (resource_group, job_collection_name, job_name)

    @command.printable
    def job_collection_get(self, job_collection_name=None):
        '''
        Get one job collection, or list them
        '''
        facade = self.scheduler_facade()
        if job_collection_name:
            return facade.job_collection_get(self.resource_group_effective(self.resource_group, exc_value=self.exc_value), job_collection_name)
        return facade.job_collection_list(resource_group=self.resource_group or None)

    @command.printable
    def job_get(self, job_collection_name=None, job_name=None, job_state=None):
        '''
        Get one job, or list the jobs of a collection
        '''
        resource_group, job_collection_name, job_name = self._job_scope(job_collection_name, job_name=job_name, job_name_required=False)
        facade = self.scheduler_facade()
        if job_name:
            return facade.job_get(resource_group, job_collection_name, job_name)
        state = SchedulerJobState.coerce_optional(job_state, exc_value=self.exc_value, prefix='job_state')
        return facade.job_list(resource_group, job_collection_name, state=state.value if state else None)

    @command.simple
    def job_remove(self, job_collection_name=None, job_name=None):
        '''
        Delete a job
        '''
        self.scheduler_facade().job_delete(*self._job_scope(job_collection_name, job_name=job_name))
        return True

    @command.simple
    def job_run(self, job_collection_name=None, job_name=None):
        '''
        Run a job now
        '''
        self.scheduler_facade().job_run(*self._job_scope(job_collection_name, job_name=job_name))
        return True

    def _action_params(self, action_type, uri, method, request_body, headers, http_authentication,
                       storage_account, storage_queue_name, storage_sas_token, storage_queue_message,
                       service_bus_namespace, service_bus_queue_name, service_bus_topic_path, service_bus_message,
                       service_bus_transport_type, service_bus_sas_key_name, service_bus_sas_key):
        '''
        Map cmdlet parameters onto a normalized action parameter dict
        '''
        queue_name = storage_queue_name
        message = storage_queue_message
        if service_bus_queue_name:
            queue_name = service_bus_queue_name
        if service_bus_message:
            message = service_bus_message
        params = {'type' : action_type,
                  'uri' : uri,
                  'method' : method,
                  'body' : request_body,
                  'headers' : json_or_file_load(headers, key='headers', exc_value=self.exc_value),
                  'authentication' : json_or_file_load(http_authentication, key='http_authentication', exc_value=self.exc_value),
                  'storage_account' : storage_account,
                  'queue_name' : queue_name,
                  'sas_token' : storage_sas_token,
                  'message' : message,
                  'namespace' : service_bus_namespace,
                  'topic_path' : service_bus_topic_path,
                  'transport_type' : service_bus_transport_type,
                  'sas_key_name' : service_bus_sas_key_name,
                  'sas_key' : service_bus_sas_key,
                 }
        return action_params_normalize(params, exc_value=self.exc_value)

    @command.printable
    def job_set(self, job_collection_name=None, job_name=None, job_state=None, start_time=None,
                action_type=None, uri=None, method=None, request_body=None, headers=None, http_authentication=None,
                storage_account=None, storage_queue_name=None, storage_sas_token=None, storage_queue_message=None,
                service_bus_namespace=None, service_bus_queue_name=None, service_bus_topic_path=None, service_bus_message=None,
                service_bus_transport_type=None, service_bus_sas_key_name=None, service_bus_sas_key=None,
                error_action=None, frequency=None, interval=None, execution_count=None, end_time=None):
        '''
        Update a job by merging the given changes onto the existing job
        '''
        resource_group, job_collection_name, job_name = self._job_scope(job_collection_name, job_name=job_name)
        facade = self.scheduler_facade()
        existing = facade.job_get(resource_group, job_collection_name, job_name)
        if not existing:
            raise self.exc_value("job %r does not exist in job collection %r resource group %r" % (job_name, job_collection_name, resource_group))

        action = self._action_params(action_type, uri, method, request_body, headers, http_authentication,
                                     storage_account, storage_queue_name, storage_sas_token, storage_queue_message,
                                     service_bus_namespace, service_bus_queue_name, service_bus_topic_path, service_bus_message,
                                     service_bus_transport_type, service_bus_sas_key_name, service_bus_sas_key)
        error_params = json_or_file_load(error_action, key='error_action', exc_value=self.exc_value)
        if (error_params is not None) and (not isinstance(error_params, dict)):
            raise self.exc_value("error_action must be a JSON object")
        freq = SchedulerRecurrenceFrequency.coerce_optional(frequency, exc_value=self.exc_value, prefix='frequency')
        recurrence = {'frequency' : freq.value if freq else None,
                      'interval' : interval,
                      'count' : execution_count,
                      'end_time' : datetime_normalize(end_time, key='end_time', exc_value=self.exc_value),
                     }
        state = SchedulerJobState.coerce_optional(job_state, exc_value=self.exc_value, prefix='job_state')

        job = existing.sdk
        job.properties = job_properties_merge(job.properties,
                                              action=action,
                                              error_action=action_params_normalize(error_params, exc_value=self.exc_value),
                                              start_time=datetime_normalize(start_time, key='start_time', exc_value=self.exc_value),
                                              state=state.value if state else None,
                                              recurrence=recurrence,
                                              exc_value=self.exc_value)
        self.logger.debug("%s patch job %s/%s/%s", self.mth(), resource_group, job_collection_name, job_name)
        return facade.job_patch(resource_group, job_collection_name, job_name, job)

Manager.command = command

Manager.main(__name__)
