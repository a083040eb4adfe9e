#
# tests/test_recoveryservices.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Recovery services vault cmdlets
'''
from unittest.mock import MagicMock

import pytest

from azcmdlets.recoveryservices import Manager

from .conftest import (RESOURCE_GROUP,
                       SUBSCRIPTION_ID,
                       item_paged,
                       not_found,
                       sdk_obj,
                       server_error,
                      )

def vault_sdk(name, resource_group=RESOURCE_GROUP):
    return sdk_obj(name=name,
                   id='/subscriptions/%s/resourceGroups/%s/providers/Microsoft.RecoveryServices/vaults/%s' % (SUBSCRIPTION_ID, resource_group, name),
                   location='eastus',
                   sku=sdk_obj(name='Standard'),
                   properties=sdk_obj(provisioning_state='Succeeded'))

@pytest.fixture
def vaults(manager_make):
    '''
    Return a callable that builds (manager, recoveryservices client, resource client)
    '''
    def _make(resource_group=RESOURCE_GROUP):
        mgr = manager_make(Manager, resource_group=resource_group)
        rs_client = MagicMock()
        res_client = MagicMock()
        mgr.az_client_set('recoveryservices', rs_client)
        mgr.az_client_set('resource', res_client)
        return (mgr, rs_client, res_client)
    return _make

def test_get_by_name(vaults):
    mgr, rs_client, _ = vaults()
    rs_client.vaults.get.return_value = vault_sdk('v0')
    res = mgr.vault_get(name='v0')
    assert len(res) == 1
    assert (res[0].name, res[0].resource_group_name, res[0].sku, res[0].provisioning_state) == ('v0', RESOURCE_GROUP, 'Standard', 'Succeeded')
    rs_client.vaults.get.assert_called_once_with(RESOURCE_GROUP, 'v0')

def test_get_by_name_missing(vaults):
    mgr, rs_client, _ = vaults()
    rs_client.vaults.get.side_effect = not_found()
    assert mgr.vault_get(name='v0') == []

def test_list_resource_group(vaults):
    mgr, rs_client, res_client = vaults()
    rs_client.vaults.list_by_resource_group.return_value = item_paged([vault_sdk('v0')], [vault_sdk('v1')])
    assert [x.name for x in mgr.vault_get()] == ['v0', 'v1']
    res_client.resource_groups.list.assert_not_called()

def test_list_all_resource_groups(vaults):
    mgr, rs_client, res_client = vaults(resource_group='')
    res_client.resource_groups.list.return_value = item_paged([sdk_obj(name='rg1'), sdk_obj(name='rg2')], [sdk_obj(name='rg3')])
    def list_by_resource_group(resource_group):
        if resource_group == 'rg2':
            raise server_error('forbidden')
        return item_paged([vault_sdk('v-' + resource_group, resource_group=resource_group)])
    rs_client.vaults.list_by_resource_group.side_effect = list_by_resource_group
    res = mgr.vault_get()
    assert [(x.name, x.resource_group_name) for x in res] == [('v-rg1', 'rg1'), ('v-rg3', 'rg3')]

def test_list_all_filter_by_name(vaults):
    mgr, rs_client, res_client = vaults(resource_group='')
    res_client.resource_groups.list.return_value = item_paged([sdk_obj(name='rg1'), sdk_obj(name='rg2')])
    rs_client.vaults.list_by_resource_group.side_effect = lambda resource_group: item_paged([vault_sdk('Backup', resource_group=resource_group),
                                                                                            vault_sdk('other-' + resource_group, resource_group=resource_group),
                                                                                           ])
    res = mgr.vault_get(name='backup')
    assert [x.resource_group_name for x in res] == ['rg1', 'rg2']
    rs_client.vaults.get.assert_not_called()
