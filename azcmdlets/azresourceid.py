#
# azcmdlets/azresourceid.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Azure resource IDs.

Cmdlets accept resources by name or by full ID (the ById parameter sets).
The classes here parse IDs into their parts and generate canonical text.
Deeper IDs (site recovery fabrics, events, jobs) are handled by the
loose helpers at the bottom of the file.

naming rules: https://docs.microsoft.com/en-us/azure/azure-resource-manager/management/resource-name-rules
'''
import functools
import re
import uuid

import azcmdlets._subscriptions
from azcmdlets.base_defaults import EXC_VALUE_DEFAULT
from azcmdlets.util import re_abs

# regexp conventions:
# X_TXT: The regexp in text form, to be found anywhere within the string.
# X_RE: compiled(X_TXT)
# X_ABS: compiled(re_abs(X_TXT))

RE_MANAGEMENT_GROUP_TXT = r'([a-zA-Z0-9\-_\.\(\)]{1,90})'
RE_MANAGEMENT_GROUP_ABS = re.compile(re_abs(RE_MANAGEMENT_GROUP_TXT))

# Up to 90 chars, no trailing '.'
RE_RESOURCE_GROUP_TXT = r'([a-zA-Z0-9\-\._\(\)]{0,89}[a-zA-Z0-9\-_\(\)])'
RE_RESOURCE_GROUP_ABS = re.compile(re_abs(RE_RESOURCE_GROUP_TXT))

EXC_DESC_DEFAULT = 'resource_id'

@functools.total_ordering
class AzAnyResourceId():
    '''
    Base class. A subclass describes its text form in _SHAPE:
    fixed tokens are matched case-insensitively, and '{attr}'
    tokens become constructor arguments in order.
    '''
    _SHAPE = ('',)
    _PATTERNS = {'management_group_name' : RE_MANAGEMENT_GROUP_ABS,
                 'resource_group_name' : RE_RESOURCE_GROUP_ABS,
                }

    def __init__(self, *args, exc_value=EXC_VALUE_DEFAULT):
        attrs = self.attrs()
        if len(args) != len(attrs):
            raise TypeError("%s() takes %d arguments (%d given)" % (type(self).__name__, len(attrs), len(args)))
        for name, value in zip(attrs, args):
            if not isinstance(value, str):
                raise TypeError("%s must be str, not %s" % (name, type(value).__name__))
            if not value:
                raise exc_value("invalid %s (empty string)" % name)
            pattern = self._PATTERNS.get(name, None)
            if pattern and (not pattern.search(value)):
                raise exc_value("invalid %s %r" % (name, value))
            setattr(self, name, value)

    subscription_id = None

    @classmethod
    def attrs(cls):
        '''
        Attribute names in constructor order
        '''
        return tuple(tok[1:-1] for tok in cls._SHAPE if tok.startswith('{'))

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ', '.join(["%s=%r" % (k, getattr(self, k)) for k in self.attrs()]))

    def __str__(self):
        return '/'.join(self._SHAPE).format(**{k : getattr(self, k) for k in self.attrs()})

    def __lt__(self, other):
        if not isinstance(other, AzAnyResourceId):
            return NotImplemented
        return str(self).lower() < str(other).lower()

    def __eq__(self, other):
        if not isinstance(other, AzAnyResourceId):
            return NotImplemented
        return str(self).lower() == str(other).lower()

    def __hash__(self):
        return hash(str(self).lower())

    @classmethod
    def from_text(cls, text, exc_desc=EXC_DESC_DEFAULT, exc_value=EXC_VALUE_DEFAULT):
        '''
        Parse text as this type. With exc_value=None, return None on failure.
        '''
        if not isinstance(text, str):
            raise TypeError("%s.from_text(): text must be str, not %s" % (cls.__name__, type(text).__name__))
        toks = text.split('/')
        args = list()
        ok = len(toks) == len(cls._SHAPE)
        if ok:
            for tok, expect in zip(toks, cls._SHAPE):
                if expect.startswith('{'):
                    args.append(tok)
                elif tok.lower() != expect.lower():
                    ok = False
                    break
        if ok:
            try:
                return cls(*args, exc_value=exc_value or ValueError)
            except ValueError:
                if exc_value:
                    raise
        if exc_value:
            raise exc_value("invalid %s %r" % (exc_desc, text))
        return None

class AzManagementGroupId(AzAnyResourceId):
    '''
    /providers/Microsoft.Management/managementGroups/some-mg
    '''
    _SHAPE = ('', 'providers', 'Microsoft.Management', 'managementGroups', '{management_group_name}')

class AzSubscriptionResourceId(AzAnyResourceId):
    '''
    /subscriptions/11111111-1111-1111-1111-111111111111
    subscription_id may be given as an alias; it is stored as a lower-case UUID.
    '''
    _SHAPE = ('', 'subscriptions', '{subscription_id}')

    def __init__(self, subscription_id, *args, exc_value=EXC_VALUE_DEFAULT):
        if isinstance(subscription_id, str):
            effective = azcmdlets._subscriptions.subscription_mapper.effective(subscription_id) # pylint: disable=protected-access
            try:
                subscription_id = str(uuid.UUID(effective)).lower()
            except (TypeError, ValueError) as exc:
                raise exc_value("subscription_id %r is not a UUID" % subscription_id) from exc
        super().__init__(subscription_id, *args, exc_value=exc_value)

class AzRGResourceId(AzSubscriptionResourceId):
    '''
    /subscriptions/11111111-1111-1111-1111-111111111111/resourceGroups/some-rg
    '''
    _SHAPE = AzSubscriptionResourceId._SHAPE + ('resourceGroups', '{resource_group_name}')

class AzResourceId(AzRGResourceId):
    '''
    /subscriptions/11111111-1111-1111-1111-111111111111/resourceGroups/some-rg/providers/Microsoft.Network/networkSecurityGroups/some-nsg
    '''
    _SHAPE = AzRGResourceId._SHAPE + ('providers', '{provider_name}', '{resource_type}', '{resource_name}')

class AzSubResourceId(AzResourceId):
    '''
    One level below a top-level resource:
      .../providers/Microsoft.Network/networkSecurityGroups/some-nsg/securityRules/some-rule
      .../providers/Microsoft.RecoveryServices/vaults/some-vault/replicationJobs/some-job
    '''
    _SHAPE = AzResourceId._SHAPE + ('{subresource_type}', '{subresource_name}')

RESOURCE_ID_CLASSES = (AzManagementGroupId,
                       AzSubscriptionResourceId,
                       AzRGResourceId,
                       AzResourceId,
                       AzSubResourceId,
                      )

def azresourceid_from_text(resource_id, exc_desc=EXC_DESC_DEFAULT, exc_value=EXC_VALUE_DEFAULT):
    '''
    Parse resource_id as whichever class matches its shape.
    With exc_value=None, return None when nothing matches.
    '''
    if isinstance(resource_id, str):
        ntoks = len(resource_id.split('/'))
        for kls in RESOURCE_ID_CLASSES:
            if len(kls._SHAPE) == ntoks: # pylint: disable=protected-access
                ret = kls.from_text(resource_id, exc_desc=exc_desc, exc_value=None)
                if ret is not None:
                    return ret
    if exc_value:
        raise exc_value("cannot parse %r as an Azure %s" % (resource_id, exc_desc))
    return None

######################################################################
# Loose helpers for ID-like strings of any depth

def resource_name_from_id(resource_id):
    '''
    Return the final name token of an ID-like string.
    Handy for SDK objects that only carry an ID.
    '''
    if not resource_id:
        return ''
    return resource_id.rstrip('/').split('/')[-1]

def resource_group_from_id(resource_id):
    '''
    Return the resource group named in an ID-like string, or ''
    '''
    return value_from_id(resource_id, 'resourceGroups')

def value_from_id(resource_id, segment):
    '''
    Return the token following segment (matched case-insensitively)
    in an ID-like string, or '' if segment does not appear.
    '''
    toks = (resource_id or '').rstrip('/').split('/')
    segment = segment.lower()
    for idx, tok in enumerate(toks[:-1]):
        if tok.lower() == segment:
            return toks[idx+1]
    return ''
