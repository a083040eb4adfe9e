#
# azcmdlets/_subscriptions.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Subscriptions known to the subscription config:
  subscriptions:
    - subscription_id: <uuid>
      tenant_id: <uuid>          # optional; defaults.tenant_id_default otherwise
      subscription_aliases: [prod, other-name]
Aliases may be used anywhere a cmdlet takes a subscription ID.
'''
import re
import threading
import uuid

import azcmdlets._paths
from azcmdlets._scfg import scfg
from azcmdlets.base_defaults import EXC_VALUE_DEFAULT
from azcmdlets.btypes import ReadOnlyDict
import azcmdlets.util

class SubscriptionInfoDict(ReadOnlyDict):
    '''
    One entry from the subscriptions list with IDs normalized
    '''
    @property
    def subscription_id(self):
        return self['subscription_id']

    @property
    def tenant_id(self):
        '''
        Empty when the entry does not name a tenant
        '''
        return self.get('tenant_id', '')

class _SubscriptionMapper():
    '''
    Loads the subscriptions list on first use and
    resolves aliases to subscription IDs.
    '''
    def __init__(self):
        self._lock = threading.RLock()
        self._aliases = None # key=alias.lower() value=(alias, subscription_id)
        self._infos = None

    ALIAS_RE = re.compile(r'^[a-zA-Z0-9]([a-zA-Z0-9\.\-_\s]*[a-zA-Z0-9])?\Z')

    def reset(self):
        '''
        Forget loaded values
        '''
        with self._lock:
            self._aliases = None
            self._infos = None

    def _load(self):
        entries = azcmdlets._paths.paths.subscription_config_list_from_default_data('subscriptions') # pylint: disable=protected-access
        aliases = dict()
        infos = list()
        for idx, entry in enumerate(entries):
            where = 'subscriptions[%d]' % idx
            if not isinstance(entry, dict):
                raise ValueError("%s has type %s; expected dict" % (where, type(entry).__name__))
            if 'subscription_id' not in entry:
                raise ValueError("%s missing 'subscription_id'" % where)
            info = dict(entry)
            info['subscription_id'] = azcmdlets.util.uuid_normalize(entry['subscription_id'], key=where+'[subscription_id]', exc_value=ValueError)
            if entry.get('tenant_id', ''):
                info['tenant_id'] = azcmdlets.util.uuid_normalize(entry['tenant_id'], key=where+'[tenant_id]', exc_value=ValueError)
            for alias in entry.get('subscription_aliases', list()):
                self._alias_add(aliases, alias, info['subscription_id'])
            infos.append(SubscriptionInfoDict(info))
        self._aliases = aliases
        self._infos = tuple(infos)

    def _alias_add(self, aliases, alias, subscription_id, exc_value=ValueError):
        if not (isinstance(alias, str) and self.ALIAS_RE.search(alias)):
            raise exc_value("invalid subscription alias %r" % alias)
        prev = aliases.setdefault(alias.lower(), (alias, subscription_id))
        if prev[1] != subscription_id:
            raise exc_value("subscription alias %r maps to both %s and %s" % (alias, prev[1], subscription_id))

    def subscription_alias_add(self, subscription_id, alias, exc_value=EXC_VALUE_DEFAULT):
        '''
        Add alias for subscription_id after the config is loaded
        '''
        subscription_id = azcmdlets.util.uuid_normalize(subscription_id, key='subscription_id', exc_value=exc_value)
        with self._lock:
            self._alias_add(self.map_dict, alias, subscription_id, exc_value=exc_value)

    @property
    def map_dict(self):
        '''
        dict of alias.lower() -> (alias, subscription_id)
        '''
        with self._lock:
            if self._aliases is None:
                self._load()
            return self._aliases

    @property
    def defaults(self) -> tuple:
        '''
        tuple of SubscriptionInfoDict
        '''
        with self._lock:
            if self._infos is None:
                self._load()
            return self._infos

    def effective(self, txt):
        '''
        Return txt as a lower-case subscription UUID when it is one
        or is a known alias; otherwise return txt unchanged.
        Does not raise.
        '''
        if not txt:
            return ''
        if not isinstance(txt, str):
            return txt
        try:
            return str(uuid.UUID(txt)).lower()
        except ValueError:
            pass
        return self.map_dict.get(txt.lower(), (txt, txt))[1]

subscription_mapper = _SubscriptionMapper()

def subscription_default():
    '''
    Effective form of defaults.subscription_default, or ''
    '''
    return subscription_mapper.effective(scfg.get('subscription_default', ''))

def subscription_info_get(subscription_id, return_default=True):
    '''
    Return the SubscriptionInfoDict for subscription_id (UUID or alias).
    Unknown subscriptions get a bare entry if return_default, else KeyError.
    '''
    effective = subscription_mapper.effective(subscription_id)
    if effective and (effective != azcmdlets.util.UUID_ZERO):
        for info in subscription_mapper.defaults:
            if info.subscription_id == effective.lower():
                return info
    if return_default:
        return SubscriptionInfoDict({'subscription_id' : (effective or '').lower()})
    raise KeyError("unknown subscription %r" % subscription_id)
