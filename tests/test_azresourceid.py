#
# tests/test_azresourceid.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Resource ID parsing
'''
import pytest

from azcmdlets.azresourceid import (AzResourceId,
                                    AzRGResourceId,
                                    AzSubResourceId,
                                    azresourceid_from_text,
                                    resource_group_from_id,
                                    resource_name_from_id,
                                    value_from_id,
                                   )

from .conftest import SUBSCRIPTION_ID

NSG_ID = '/subscriptions/%s/resourceGroups/rg1/providers/Microsoft.Network/networkSecurityGroups/nsg1' % SUBSCRIPTION_ID
RULE_ID = NSG_ID + '/securityRules/rule1'
EVENT_ID = '/subscriptions/%s/resourceGroups/rg1/providers/Microsoft.RecoveryServices/vaults/v1/replicationEvents/ev1' % SUBSCRIPTION_ID

class TestFromText:
    '''
    azresourceid_from_text picks the class by shape
    '''
    def test_resource(self):
        azrid = azresourceid_from_text(NSG_ID)
        assert type(azrid) is AzResourceId # pylint: disable=unidiomatic-typecheck
        assert azrid.resource_group_name == 'rg1'
        assert azrid.resource_name == 'nsg1'
        assert azrid.resource_type == 'networkSecurityGroups'

    def test_subresource(self):
        azrid = azresourceid_from_text(RULE_ID)
        assert isinstance(azrid, AzSubResourceId)
        assert azrid.subresource_type == 'securityRules'
        assert azrid.subresource_name == 'rule1'

    def test_resource_group(self):
        azrid = azresourceid_from_text('/subscriptions/%s/resourceGroups/rg1' % SUBSCRIPTION_ID)
        assert type(azrid) is AzRGResourceId # pylint: disable=unidiomatic-typecheck

    def test_resource_group_trailing_newline(self):
        assert azresourceid_from_text('/subscriptions/%s/resourceGroups/rg1\n' % SUBSCRIPTION_ID, exc_value=None) is None

    def test_invalid(self):
        assert azresourceid_from_text('/not/an/id', exc_value=None) is None
        with pytest.raises(ValueError):
            azresourceid_from_text('/not/an/id')

    def test_str_round_trip(self):
        assert str(azresourceid_from_text(NSG_ID)).lower() == NSG_ID.lower()

class TestIdHelpers:
    '''
    Loose helpers for ID-like strings
    '''
    def test_resource_name(self):
        assert resource_name_from_id(RULE_ID) == 'rule1'
        assert resource_name_from_id(RULE_ID + '/') == 'rule1'
        assert resource_name_from_id(None) == ''

    def test_resource_group(self):
        assert resource_group_from_id(EVENT_ID) == 'rg1'
        assert resource_group_from_id('/subscriptions/%s' % SUBSCRIPTION_ID) == ''

    def test_value_from_id(self):
        assert value_from_id(EVENT_ID, 'replicationEvents') == 'ev1'
        assert value_from_id(EVENT_ID, 'VAULTS') == 'v1'
        assert value_from_id(EVENT_ID, 'replicationFabrics') == ''
        assert value_from_id('', 'vaults') == ''
