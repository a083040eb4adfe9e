#
# azcmdlets/_paths.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Locate and load the subscription config (YAML).

Search order:
  --subscription_config_path on the command line
  AZCMDLETS_CONFIG in the environment
  ~/.azcmdlets/subscriptions.yaml
'''
import copy
import os
import threading

import yaml

from azcmdlets.base_defaults import EXC_VALUE_DEFAULT
from azcmdlets.exceptions import (ApplicationExit,
                                  SubscriptionConfigNotFoundError,
                                 )

ENVIRON_SUBSCRIPTION_CONFIG = 'AZCMDLETS_CONFIG'

class Paths():
    '''
    Finds and caches the subscription config.
    One instance (paths) serves the process.
    '''
    def __init__(self):
        self._lock = threading.RLock()
        self._filename = None
        self._data = None

    CONFIG_DEFAULT_TUPLE_HOME = ('.azcmdlets', 'subscriptions.yaml')

    def reset(self, subscription_config_filename='', subscription_config_data=None):
        '''
        Forget what is cached. Tests pass in a filename
        and data to stand in for a real config file.
        '''
        with self._lock:
            self._filename = None
            self._data = None
            if subscription_config_filename:
                self._filename_set(subscription_config_filename)
            if subscription_config_data:
                assert self._filename
                assert isinstance(subscription_config_data, dict)
                self._data = copy.deepcopy(subscription_config_data)

    def _filename_set(self, path):
        if not isinstance(path, str):
            raise TypeError("path must be str, not %s" % type(path))
        if not path:
            raise ValueError("invalid (empty) path")
        self._filename = path

    @property
    def subscription_config_filename(self):
        '''
        Path of the subscription config, searching for it on first use
        '''
        with self._lock:
            if not self._filename:
                self._filename = self._subscription_config_find()
            return self._filename

    def subscription_config_filename_setdefault(self, path):
        '''
        Use path unless a filename is already chosen.
        Returns the filename in effect.
        '''
        with self._lock:
            if not self._filename:
                self._filename_set(path)
            return self._filename

    def _subscription_config_find(self):
        path = os.environ.get(ENVIRON_SUBSCRIPTION_CONFIG, '')
        if path:
            return path
        path = os.path.join(os.path.expanduser('~'), *self.CONFIG_DEFAULT_TUPLE_HOME)
        if os.path.isfile(path):
            return path
        raise SubscriptionConfigNotFoundError("cannot locate subscription configuration; try setting %s" % ENVIRON_SUBSCRIPTION_CONFIG)

    @property
    def subscription_config_data(self) -> dict:
        '''
        Parsed contents of the subscription config. An empty file is an empty dict.
        '''
        with self._lock:
            if self._data is None:
                self._data = self._load(self.subscription_config_filename)
            return self._data

    @staticmethod
    def _load(filename):
        try:
            with open(filename, 'r') as f:
                data = yaml.safe_load(f)
        except FileNotFoundError as exc:
            raise SubscriptionConfigNotFoundError("subscription config file %r not found" % filename) from exc
        except yaml.error.MarkedYAMLError as exc:
            raise ApplicationExit("cannot parse %r: error line %s column %s" % (filename, exc.problem_mark.line, exc.problem_mark.column)) from exc
        except yaml.error.YAMLError as exc:
            # str() of YAMLError reads better than repr()
            raise ApplicationExit("cannot parse %r: %s" % (filename, exc)) from exc
        if data is None:
            return dict()
        if not isinstance(data, dict):
            raise ApplicationExit("content of subscription config file %r is not a dict" % filename)
        return data

    @staticmethod
    def subscription_config_dict_from_data(filename, data, key, exc_value=EXC_VALUE_DEFAULT) -> dict:
        '''
        Return data[key], which must be a dict; missing is {}.
        '''
        ret = data.get(key, dict())
        if not isinstance(ret, dict):
            raise exc_value("%s in %s has type %s; expected dict" % (key, filename, type(ret).__name__))
        return ret

    def subscription_config_list_from_default_data(self, key, exc_value=EXC_VALUE_DEFAULT) -> list:
        '''
        Return the list under key in the subscription config; missing is [].
        '''
        with self._lock:
            filename = self.subscription_config_filename
            ret = self.subscription_config_data.get(key, list())
        if not isinstance(ret, list):
            raise exc_value("%s in %s has type %s; expected list" % (key, filename, type(ret).__name__))
        return ret

paths = Paths()
