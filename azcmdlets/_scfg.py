#
# azcmdlets/_scfg.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
"scfg" is the defaults section of the subscription config:
  defaults:
    tenant_id_default: <uuid>           # required
    subscription_default: <uuid|alias>
    cloud_name: AzureCloud
    client_id_default: login            # see cmdlet.AzCred
'''
import threading

import azcmdlets._paths
from azcmdlets.base_defaults import EXC_VALUE_DEFAULT
from azcmdlets.btypes import ReadOnlyDict
import azcmdlets.clouds
import azcmdlets.util

class _Scfg():
    '''
    Validated, read-only view of the defaults. Values are
    attributes (scfg.tenant_id_default) or scfg.get(name, default).
    '''
    def __init__(self):
        self._lock = threading.RLock()
        self._filename = None
        self._values = None

    REQUIRED = ('tenant_id_default',)

    def reset(self):
        '''
        Forget loaded values
        '''
        with self._lock:
            self._filename = None
            self._values = None

    def _loaded(self, exc_value=EXC_VALUE_DEFAULT):
        '''
        Return the validated defaults, loading them on first use
        '''
        with self._lock:
            if self._values is None:
                paths = azcmdlets._paths.paths # pylint: disable=protected-access
                filename = paths.subscription_config_filename
                data = paths.subscription_config_dict_from_data(filename, paths.subscription_config_data, 'defaults', exc_value=exc_value)
                missing = [k for k in self.REQUIRED if k not in data]
                if missing:
                    raise exc_value("%s missing value(s): %s" % (filename, ','.join('defaults[%s]' % k for k in missing)))
                self._values = ReadOnlyDict({k : self._validate(k, v, exc_value) for k, v in data.items()})
                self._filename = filename
            return self._values

    def _validate(self, key, value, exc_value):
        '''
        Keys with a _v__<key> method are checked by it.
        Otherwise scalars pass and containers are frozen.
        '''
        check = getattr(self, '_v__' + key, None)
        if check:
            return check(value, 'defaults[%s]' % key, exc_value)
        if isinstance(value, (bool, int, str)) or (value is None):
            return value
        if isinstance(value, dict):
            return ReadOnlyDict(value)
        if isinstance(value, list):
            return tuple(value)
        raise exc_value("defaults[%s] has unexpected type %s" % (key, type(value).__name__))

    @staticmethod
    def _v__tenant_id_default(value, desc, exc_value):
        return azcmdlets.util.uuid_normalize(value, key=desc, exc_value=exc_value)

    @staticmethod
    def _v__cloud_name(value, desc, exc_value):
        if not isinstance(value, str):
            raise exc_value("%s has unexpected type %s" % (desc, type(value).__name__))
        azcmdlets.clouds.cloud_get(value, exc_value=exc_value)
        return value

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        values = self._loaded()
        try:
            return values[name]
        except KeyError as exc:
            raise AttributeError("scfg has no value %r; check configuration file %s" % (name, self._filename)) from exc

    def get(self, name, defaultvalue):
        '''
        Return the configured value for name, or defaultvalue
        '''
        if (not isinstance(name, str)) or (not name) or name.startswith('_'):
            return defaultvalue
        return self._loaded().get(name, defaultvalue)

scfg = _Scfg()
