#
# tests/test_cmdlet.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Shared cmdlet machinery: presentation models, call wrappers,
parameter set dispatch, and the command-line path.
'''
from unittest.mock import MagicMock

import pytest

from azcmdlets.cmdlet import (PresentationModel,
                              ServiceFacade,
                              ServiceManager,
                             )
from azcmdlets.command import Command
from azcmdlets.exceptions import ApplicationExit
from azcmdlets.paging import PageResult
from azcmdlets.parametersets import ParameterSet

from .conftest import (RESOURCE_GROUP,
                       SUBSCRIPTION_ID,
                       item_paged,
                       not_found,
                       sdk_obj,
                       server_error,
                      )

class ThingModel(PresentationModel):
    '''
    Flattened view of a made-up SDK object
    '''
    FIELDS = ('name',
              'id',
              ('state', 'properties.state'),
              ('owner', 'properties.extra.owner'),
             )
    TABLE_COLUMNS = ('name', 'state')

class ThingFacade(ServiceFacade):
    '''
    Facade over a MagicMock client with a things operation group
    '''
    def thing_get(self, name):
        return ThingModel.from_sdk(self._cw_get(self.client.things.get, name))

    def _thing_page(self, next_link=None):
        return self._cw_page(self.client.things.list, next_link=next_link, transform=ThingModel.from_sdk)

    def thing_list(self, next_link=None, walk=True):
        return self._pages(self._thing_page, next_link=next_link, walk=walk)

command = Command()

class SampleManager(ServiceManager):
    '''
    Manager with a single parameter-set driven cmdlet
    '''
    ACTION_ARGS = (('name', {'help' : 'thing name'}),
                   ('resource_id', {'help' : 'thing resource ID'}),
                   ('verbose_flag', {'action' : 'store_true'}),
                  )

    THING_GET_SETS = (ParameterSet('ByName', required=('name',)),
                      ParameterSet('ByResourceId', required=('resource_id',)),
                      ParameterSet('All'),
                     )

    calls = None

    @command.printable
    def thing_get(self, name=None, resource_id=None):
        ps = self.parameter_set_select(self.THING_GET_SETS, {'name' : name, 'resource_id' : resource_id})
        type(self).calls.append(ps.name)
        return ['thing:%s' % ps.name]

SampleManager.command = command

@pytest.fixture
def sample_calls(monkeypatch):
    calls = list()
    monkeypatch.setattr(SampleManager, 'calls', calls)
    return calls

class TestPresentationModel:
    '''
    PresentationModel
    '''
    def test_from_sdk_flattens(self):
        obj = sdk_obj(name='n1', id='/x/n1', properties=sdk_obj(state='Enabled', extra={'owner' : 'me'}))
        model = ThingModel.from_sdk(obj)
        assert model.to_dict() == {'name' : 'n1', 'id' : '/x/n1', 'state' : 'Enabled', 'owner' : 'me'}
        assert model.sdk is obj

    def test_missing_hops_are_none(self):
        model = ThingModel.from_sdk(sdk_obj(name='n1', properties=None))
        assert model.state is None
        assert model.owner is None
        assert model.id is None

    def test_none(self):
        assert ThingModel.from_sdk(None) is None

    def test_unexpected_kwargs(self):
        with pytest.raises(TypeError):
            ThingModel(bogus=1)

    def test_equality(self):
        assert ThingModel(name='a') == ThingModel(name='a')
        assert ThingModel(name='a') != ThingModel(name='b')

class TestCallWrappers:
    '''
    Missing-resource handling and paging through a facade
    '''
    @staticmethod
    def facade(client):
        return ThingFacade(client, MagicMock())

    def test_get_missing_is_none(self):
        client = MagicMock()
        client.things.get.side_effect = not_found()
        assert self.facade(client).thing_get('gone') is None

    def test_get_other_errors_raise(self):
        client = MagicMock()
        client.things.get.side_effect = server_error()
        with pytest.raises(Exception) as exc_info:
            self.facade(client).thing_get('x')
        assert 'boom' in str(exc_info.value)

    def test_list_walks_all_pages(self):
        client = MagicMock()
        client.things.list.side_effect = lambda: item_paged([sdk_obj(name='a')], [sdk_obj(name='b')])
        res = self.facade(client).thing_list()
        assert [x.name for x in res] == ['a', 'b']
        assert client.things.list.call_count == 2

    def test_list_one_page(self):
        client = MagicMock()
        client.things.list.side_effect = lambda: item_paged([sdk_obj(name='a')], [sdk_obj(name='b')])
        res = self.facade(client).thing_list(walk=False)
        assert isinstance(res, PageResult)
        assert [x.name for x in res.items] == ['a']
        assert res.next_link == 'page-1'
        res = self.facade(client).thing_list(next_link=res.next_link)
        assert [x.name for x in res.items] == ['b']
        assert res.next_link is None

    def test_list_missing_parent_is_empty(self):
        client = MagicMock()
        client.things.list.side_effect = not_found()
        assert self.facade(client).thing_list() == []

class TestServiceManager:
    '''
    ServiceManager helpers and dispatch
    '''
    def test_client_cache(self, manager_make):
        mgr = manager_make(SampleManager)
        client = MagicMock()
        mgr.az_client_set('thing', client)
        assert mgr._az_client_gen_property('thing', object) is client # pylint: disable=protected-access

    def test_client_mousetrap(self, manager_make):
        mgr = manager_make(SampleManager)
        with pytest.raises(AssertionError):
            mgr._az_client_gen_property('nothing-cached', object) # pylint: disable=protected-access

    def test_subscription_alias(self, manager_make):
        mgr = manager_make(SampleManager, subscription_id='testsub')
        assert mgr.subscription_id == SUBSCRIPTION_ID
        assert mgr.resource_group == RESOURCE_GROUP

    def test_bool_optional(self, manager_make):
        mgr = manager_make(SampleManager)
        assert mgr.bool_optional(None) is None
        assert mgr.bool_optional('') is None
        assert mgr.bool_optional('true') is True
        assert mgr.bool_optional(False) is False
        with pytest.raises(ValueError):
            mgr.bool_optional('sometimes', key='enabled')

    def test_tags_normalize(self, manager_make):
        mgr = manager_make(SampleManager)
        assert mgr.tags_normalize('{"a": "b"}') == {'a' : 'b'}
        assert mgr.tags_normalize(None) is None
        with pytest.raises(ValueError):
            mgr.tags_normalize('[1, 2]')

    def test_dispatch_by_parameter_set(self, manager_make, sample_calls):
        mgr = manager_make(SampleManager)
        assert mgr.thing_get(name='n') == ['thing:ByName']
        assert mgr.thing_get(resource_id='/r') == ['thing:ByResourceId']
        assert mgr.thing_get() == ['thing:All']
        assert sample_calls == ['ByName', 'ByResourceId', 'All']

    def test_main_execute_filters_kwargs(self, manager_make, sample_calls, capsys):
        mgr = manager_make(SampleManager)
        mgr.args_save({'action' : 'thing_get', 'name' : 'n', 'verbose_flag' : None})
        with pytest.raises(ApplicationExit) as exc_info:
            mgr.main_execute()
        assert exc_info.value.code == 0
        assert sample_calls == ['ByName']
        assert 'thing:ByName' in capsys.readouterr().out

    def test_main_execute_parameter_set_error(self, manager_make, sample_calls):
        mgr = manager_make(SampleManager)
        mgr.args_save({'action' : 'thing_get', 'name' : 'n', 'resource_id' : '/r'})
        with pytest.raises(ApplicationExit) as exc_info:
            mgr.main_execute()
        assert exc_info.value.code == 1
        assert not sample_calls

    def test_main_execute_unknown_action(self, manager_make):
        mgr = manager_make(SampleManager)
        mgr.args_save({'action' : 'thing_frob'})
        with pytest.raises(ApplicationExit) as exc_info:
            mgr.main_execute()
        assert exc_info.value.code == 1

    def test_command_line(self, sample_calls, capsys):
        with pytest.raises(SystemExit) as exc_info:
            SampleManager.main_with_args(['thing_get',
                                          '--resource_id', '/r',
                                          '--subscription_id', SUBSCRIPTION_ID,
                                          '--resource_group', RESOURCE_GROUP,
                                         ])
        assert exc_info.value.code == 0
        assert sample_calls == ['ByResourceId']
        assert 'thing:ByResourceId' in capsys.readouterr().out

class TestCommand:
    '''
    Command registry
    '''
    def test_actions_and_kinds(self):
        assert command.actions == ['thing_get']
        assert list(command.commands('printable')) == ['thing_get']
        assert command.commands('simple') == {}

    def test_duplicate_rejected(self):
        reg = Command()
        def thing_get(self):
            return None
        reg.simple(thing_get)
        with pytest.raises(ValueError):
            reg.printable(thing_get)

    def test_unknown_kind(self):
        with pytest.raises(AttributeError):
            Command().printable_sideways # pylint: disable=expression-not-assigned

    def test_handle_other_class_declined(self, sample_calls):
        assert not command.handle('thing_get', Command.KINDS, object())
        assert not command.handle('nope', Command.KINDS, object())
        assert sample_calls == []
