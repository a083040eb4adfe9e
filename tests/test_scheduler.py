#
# tests/test_scheduler.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Scheduler job collection and job cmdlets
'''
import datetime
from unittest.mock import MagicMock

from azure.mgmt.scheduler.models import (BasicAuthentication,
                                         HttpRequest,
                                         JobAction,
                                         JobCollectionDefinition,
                                         JobDefinition,
                                         JobErrorAction,
                                         JobProperties,
                                         JobRecurrence,
                                         OAuthAuthentication,
                                         StorageQueueMessage,
                                        )
import pytest

from azcmdlets.btypes import SchedulerJobActionType
from azcmdlets.scheduler import (Manager,
                                 action_params_normalize,
                                 http_authentication_build,
                                 job_action_build,
                                 job_action_merge,
                                 job_properties_merge,
                                 job_recurrence_merge,
                                )

from .conftest import (RESOURCE_GROUP,
                       item_paged,
                       not_found,
                      )

COLLECTION = 'jc'
START = datetime.datetime(2030, 1, 1, tzinfo=datetime.timezone.utc)

def http_action(uri='http://example.com/ping', method='POST', error_action=None):
    return JobAction(type='Http', request=HttpRequest(uri=uri, method=method), error_action=error_action)

def job_sdk(name='job0', action=None, state='Enabled'):
    ret = JobDefinition(properties=JobProperties(action=action or http_action(),
                                                 recurrence=JobRecurrence(frequency='Hour', interval=1),
                                                 start_time=START,
                                                 state=state))
    ret.name = name
    return ret

@pytest.fixture
def scheduler(manager_make):
    mgr = manager_make(Manager)
    client = MagicMock()
    mgr.az_client_set('scheduler', client)
    client.jobs.patch.side_effect = lambda *args: args[-1]
    return (mgr, client)

class TestActionHelpers:
    '''
    Building and merging job actions
    '''
    def test_normalize_drops_empty(self):
        res = action_params_normalize({'type' : 'https', 'uri' : 'https://x', 'body' : '', 'headers' : None})
        assert res == {'type' : SchedulerJobActionType.HTTPS, 'uri' : 'https://x'}

    def test_normalize_nothing(self):
        assert action_params_normalize({'uri' : None}) is None
        assert action_params_normalize(None) is None

    def test_normalize_unknown_key(self):
        with pytest.raises(ValueError):
            action_params_normalize({'url' : 'https://x'})

    def test_authentication(self):
        assert isinstance(http_authentication_build({'type' : 'basic', 'username' : 'u', 'password' : 'p'}), BasicAuthentication)
        res = http_authentication_build({'type' : 'ActiveDirectoryOAuth', 'tenant' : 't', 'audience' : 'a', 'client_id' : 'c', 'secret' : 's'})
        assert isinstance(res, OAuthAuthentication)
        assert res.client_id == 'c'
        assert http_authentication_build(None) is None
        with pytest.raises(ValueError):
            http_authentication_build({'type' : 'Kerberos'})

    def test_build_http_default_method(self):
        res = job_action_build({'type' : SchedulerJobActionType.HTTP, 'uri' : 'http://x'}, JobAction)
        assert res.request.method == 'GET'

    def test_build_service_bus_defaults(self):
        res = job_action_build({'type' : SchedulerJobActionType.SERVICE_BUS_TOPIC,
                                'namespace' : 'ns',
                                'topic_path' : 'topic',
                                'message' : 'hi',
                                'sas_key_name' : 'RootManageSharedAccessKey',
                                'sas_key' : 'secret',
                               },
                               JobAction)
        msg = res.service_bus_topic_message
        assert msg.transport_type == 'NetMessaging'
        assert msg.authentication.sas_key_name == 'RootManageSharedAccessKey'
        assert res.service_bus_queue_message is None

    def test_build_missing_keys(self):
        with pytest.raises(ValueError) as exc_info:
            job_action_build({'type' : SchedulerJobActionType.STORAGE_QUEUE, 'storage_account' : 'sa'}, JobAction)
        assert 'queue_name' in str(exc_info.value)

    def test_merge_http_to_https(self):
        existing = http_action()
        res = job_action_merge(existing, {'type' : SchedulerJobActionType.HTTPS}, JobAction)
        assert res is existing
        assert res.type == 'Https'
        assert (res.request.uri, res.request.method) == ('http://example.com/ping', 'POST')

    def test_merge_without_type_keeps_type(self):
        res = job_action_merge(http_action(), {'uri' : 'http://example.com/other'}, JobAction)
        assert res.type == 'Http'
        assert res.request.uri == 'http://example.com/other'

    def test_merge_replaces_other_type(self):
        existing = http_action()
        params = {'type' : SchedulerJobActionType.STORAGE_QUEUE,
                  'storage_account' : 'sa',
                  'queue_name' : 'q',
                  'sas_token' : 'tok',
                  'message' : 'm',
                 }
        res = job_action_merge(existing, params, JobAction)
        assert res is not existing
        assert res.type == 'StorageQueue'
        assert res.request is None
        assert res.queue_message.queue_name == 'q'

    def test_merge_storage_queue_in_place(self):
        existing = JobAction(type='StorageQueue', queue_message=StorageQueueMessage(storage_account='sa', queue_name='q', sas_token='t', message='m'))
        res = job_action_merge(existing, {'message' : 'new'}, JobAction)
        assert (res.queue_message.queue_name, res.queue_message.message) == ('q', 'new')

    def test_merge_nothing(self):
        existing = http_action()
        assert job_action_merge(existing, None, JobAction) is existing

    def test_recurrence_merge(self):
        existing = JobRecurrence(frequency='Hour', interval=1, count=5)
        res = job_recurrence_merge(existing, interval=3)
        assert (res.frequency, res.interval, res.count) == ('Hour', 3, 5)
        assert job_recurrence_merge(None) is None

    def test_properties_merge_keeps_error_action(self):
        error_action = JobErrorAction(type='Http', request=HttpRequest(uri='http://example.com/err', method='POST'))
        existing = JobProperties(action=http_action(error_action=error_action), state='Disabled', start_time=START)
        res = job_properties_merge(existing, action={'uri' : 'http://example.com/new'})
        assert res.action.error_action.request.uri == 'http://example.com/err'
        assert res.state == 'Disabled'
        assert res.start_time == START

    def test_properties_merge_needs_action(self):
        with pytest.raises(ValueError):
            job_properties_merge(JobProperties(), state='Enabled')

class TestJobs:
    '''
    Job cmdlets
    '''
    def test_collection_list(self, scheduler):
        mgr, client = scheduler
        client.job_collections.list_by_resource_group.return_value = item_paged([JobCollectionDefinition(location='eastus')], [])
        assert len(mgr.job_collection_get()) == 1

    def test_get(self, scheduler):
        mgr, client = scheduler
        client.jobs.get.return_value = job_sdk()
        res = mgr.job_get(job_collection_name=COLLECTION, job_name='job0')
        assert (res.name, res.state, res.action_type, res.frequency) == ('job0', 'Enabled', 'Http', 'Hour')
        client.jobs.get.assert_called_once_with(RESOURCE_GROUP, COLLECTION, 'job0')

    def test_list_state_filter(self, scheduler):
        mgr, client = scheduler
        client.jobs.list.return_value = item_paged([job_sdk(state='Disabled')])
        res = mgr.job_get(job_collection_name=COLLECTION, job_state='disabled')
        assert [x.state for x in res] == ['Disabled']
        assert client.jobs.list.call_args[1]['filter'] == "state eq 'Disabled'"

    def test_list_no_filter(self, scheduler):
        mgr, client = scheduler
        client.jobs.list.return_value = item_paged([])
        mgr.job_get(job_collection_name=COLLECTION)
        assert 'filter' not in client.jobs.list.call_args[1]

    def test_collection_required(self, scheduler):
        mgr, _ = scheduler
        with pytest.raises(ValueError):
            mgr.job_get(job_name='job0')

    def test_set_missing(self, scheduler):
        mgr, client = scheduler
        client.jobs.get.side_effect = not_found()
        with pytest.raises(ValueError) as exc_info:
            mgr.job_set(job_collection_name=COLLECTION, job_name='job0', job_state='Disabled')
        assert 'does not exist' in str(exc_info.value)
        client.jobs.patch.assert_not_called()

    def test_set_state_keeps_the_rest(self, scheduler):
        mgr, client = scheduler
        client.jobs.get.return_value = job_sdk()
        res = mgr.job_set(job_collection_name=COLLECTION, job_name='job0', job_state='disabled', interval=2)
        assert (res.state, res.interval, res.frequency) == ('Disabled', 2, 'Hour')
        assert res.start_time == START
        assert (res.uri, res.method) == ('http://example.com/ping', 'POST')
        args = client.jobs.patch.call_args[0]
        assert args[:3] == (RESOURCE_GROUP, COLLECTION, 'job0')

    def test_set_http_authentication(self, scheduler):
        mgr, client = scheduler
        client.jobs.get.return_value = job_sdk()
        res = mgr.job_set(job_collection_name=COLLECTION, job_name='job0', action_type='Https', uri='https://example.com/ping',
                          http_authentication='{"type": "Basic", "username": "u", "password": "p"}')
        assert res.action_type == 'Https'
        assert res.sdk.properties.action.request.authentication.username == 'u'

    def test_set_service_bus_queue(self, scheduler):
        mgr, client = scheduler
        client.jobs.get.return_value = job_sdk()
        res = mgr.job_set(job_collection_name=COLLECTION, job_name='job0', action_type='servicebusqueue',
                          service_bus_namespace='ns', service_bus_queue_name='q', service_bus_message='hello')
        assert res.service_bus_queue_name == 'q'
        assert res.sdk.properties.action.service_bus_queue_message.transport_type == 'NetMessaging'

    def test_set_error_action(self, scheduler):
        mgr, client = scheduler
        client.jobs.get.return_value = job_sdk()
        res = mgr.job_set(job_collection_name=COLLECTION, job_name='job0',
                          error_action='{"type": "Http", "uri": "http://example.com/err"}')
        assert res.error_action_type == 'Http'
        assert res.sdk.properties.action.error_action.request.method == 'GET'

    def test_set_error_action_not_object(self, scheduler):
        mgr, client = scheduler
        client.jobs.get.return_value = job_sdk()
        with pytest.raises(ValueError):
            mgr.job_set(job_collection_name=COLLECTION, job_name='job0', error_action='["Http"]')

    def test_set_start_time(self, scheduler):
        mgr, client = scheduler
        client.jobs.get.return_value = job_sdk()
        res = mgr.job_set(job_collection_name=COLLECTION, job_name='job0', start_time='2031-02-03T04:05:06Z')
        assert res.start_time == datetime.datetime(2031, 2, 3, 4, 5, 6, tzinfo=datetime.timezone.utc)

    def test_run_and_remove(self, scheduler):
        mgr, client = scheduler
        assert mgr.job_run(job_collection_name=COLLECTION, job_name='job0')
        assert mgr.job_remove(job_collection_name=COLLECTION, job_name='job0')
        client.jobs.run.assert_called_once_with(RESOURCE_GROUP, COLLECTION, 'job0')
        client.jobs.delete.assert_called_once_with(RESOURCE_GROUP, COLLECTION, 'job0')
