#
# azcmdlets/clouds.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Wrappers to manage fetching msrestazure.azure_cloud.Cloud objects.
The cloud determines the ARM endpoint used to build management
clients and the DNS suffix used to build KeyVault URLs.
'''
import inspect

import msrestazure.azure_cloud

import azcmdlets.base_defaults

_CLOUDS = {tup[1].name : tup[1] for tup in inspect.getmembers(msrestazure.azure_cloud) if isinstance(tup[1], msrestazure.azure_cloud.Cloud)}

# PowerShell environment name for the public cloud
_CLOUDS['AzurePublicCloud'] = msrestazure.azure_cloud.AZURE_PUBLIC_CLOUD

_CLOUDS_LOWER = {k.lower() : v for k, v in _CLOUDS.items()}

def cloud_names():
    '''
    Return a sorted list of known cloud names
    '''
    return sorted(_CLOUDS.keys())

def cloud_get(name=None, exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Return the named cloud object. None or '' means the default cloud.
    '''
    name = name or azcmdlets.base_defaults.CLOUD_NAME_DEFAULT
    try:
        return _CLOUDS_LOWER[name.lower()]
    except KeyError as exc:
        raise exc_value("unknown cloud %r" % name) from exc

def keyvault_url(vault_name, cloud=None):
    '''
    Return the data-plane URL for the named vault in the given cloud
    '''
    cloud = cloud or cloud_get()
    return "https://%s%s/" % (vault_name, cloud.suffixes.keyvault_dns)
