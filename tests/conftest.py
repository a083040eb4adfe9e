#
# tests/conftest.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Shared fixtures. Every test runs against an in-memory subscription
config and with SDK client generation disabled; tests install
MagicMock clients with az_client_set().
'''
import types

import azure.core.exceptions
import azure.core.paging
import pytest

import azcmdlets
from azcmdlets.cmdlet import ServiceManager
import azcmdlets.output

SUBSCRIPTION_ID = '11111111-2222-3333-4444-555555555555'
TENANT_ID = '99999999-8888-7777-6666-555555555555'
RESOURCE_GROUP = 'rg'

SUBSCRIPTION_CONFIG_DATA = {'defaults' : {'tenant_id_default' : TENANT_ID,
                                          'subscription_default' : SUBSCRIPTION_ID,
                                         },
                            'subscriptions' : [{'subscription_id' : SUBSCRIPTION_ID,
                                                'tenant_id' : TENANT_ID,
                                                'subscription_aliases' : ['testsub'],
                                               },
                                              ],
                           }

@pytest.fixture(autouse=True)
def azcmdlets_test_env(monkeypatch):
    '''
    Reset global state around each test
    '''
    azcmdlets.reset_caches(subscription_config_filename='/nonexistent/azcmdlets-test.yaml',
                           subscription_config_data=SUBSCRIPTION_CONFIG_DATA)
    azcmdlets.output.uncapture_for_pytest()
    monkeypatch.setattr(ServiceManager, '_AZ_CLIENT_GEN_MOUSETRAP', True)
    yield
    azcmdlets.output.uncapture_for_pytest()
    azcmdlets.reset_caches()

@pytest.fixture
def manager_make():
    '''
    Return a callable that constructs a Manager of the given class
    against the test subscription and resource group.
    '''
    def _make(kls, **kwargs):
        kwargs.setdefault('subscription_id', SUBSCRIPTION_ID)
        kwargs.setdefault('tenant_id', TENANT_ID)
        kwargs.setdefault('resource_group', RESOURCE_GROUP)
        ret = kls(**kwargs)
        azcmdlets.output.uncapture_for_pytest()
        return ret
    return _make

def sdk_obj(**kwargs):
    '''
    Stand-in for an SDK model. Only the given attributes exist.
    '''
    return types.SimpleNamespace(**kwargs)

def item_paged(*pages):
    '''
    Return azure.core.paging.ItemPaged that serves the given pages.
    The continuation token for page N is the string 'page-N'.
    '''
    def get_next(continuation_token):
        idx = int(continuation_token.split('-')[1]) if continuation_token else 0
        return idx

    def extract_data(idx):
        token = 'page-%d' % (idx + 1) if (idx + 1) < len(pages) else None
        return (token, iter(pages[idx]))

    return azure.core.paging.ItemPaged(get_next, extract_data)

def not_found(txt='not found'):
    '''
    Exception the track2 SDK raises for 404
    '''
    return azure.core.exceptions.ResourceNotFoundError(message=txt)

def server_error(txt='boom'):
    '''
    Generic track2 SDK failure that is not a 404
    '''
    return azure.core.exceptions.HttpResponseError(message=txt)
