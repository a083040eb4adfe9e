#
# azcmdlets/base_defaults.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Default settings that are not loaded from any configuration.
To keep dependencies simple, use only Python built-in types here.
'''
# Used when the subscription config does not name a cloud.
CLOUD_NAME_DEFAULT = 'AzureCloud'

EXC_VALUE_DEFAULT = ValueError

# Integration account map content type when none is given.
INTEGRATION_ACCOUNT_MAP_CONTENT_TYPE_DEFAULT = 'application/xml'

# KeyVault object names (keys, secrets, certificates)
KEYVAULT_OBJECT_NAME_RE_TXT = r'^[0-9a-zA-Z-]{1,127}\Z'

# Policy definition mode when none is given.
POLICY_MODE_DEFAULT = 'All'

# Prefix for item expansion
PF = '  '

# Site recovery job resume comment when none is given.
# The service rejects an empty comment.
SITE_RECOVERY_RESUME_COMMENT_DEFAULT = ' '

# Bounds for network security rule priority
NSG_RULE_PRIORITY_MIN = 100
NSG_RULE_PRIORITY_MAX = 4096

# KeyVault vault names
KEYVAULT_VAULT_NAME_RE_TXT = r'^[a-zA-Z0-9-]{3,24}\Z'
