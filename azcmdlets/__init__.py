#
# azcmdlets/__init__.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Cmdlets for Azure Resource Manager services.
The names here are the process-wide subscription config state.
'''
from ._paths import paths
from ._scfg import scfg
from ._subscriptions import (subscription_default,
                             subscription_info_get,
                             subscription_mapper,
                            )

__all__ = ['paths',
           'reset_caches',
           'scfg',
           'subscription_default',
           'subscription_info_get',
           'subscription_mapper',
          ]

def reset_caches(subscription_config_filename='', subscription_config_data=None):
    '''
    Discard everything loaded from the subscription config.
    Tests pass a filename and data to stand in for a real file.
    '''
    paths.reset(subscription_config_filename=subscription_config_filename, subscription_config_data=subscription_config_data)
    scfg.reset()
    subscription_mapper.reset()
