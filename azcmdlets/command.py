#
# azcmdlets/command.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Command collects the cmdlets of one service module. Decorating a
Manager method with @command.<kind> makes it a command-line action.

Kinds:
  simple            run it; the return value is discarded
  printable         run it and print the result
  printable_table   run it and print the (list) result as a table
'''
import functools
import sys

from azcmdlets.util import (expand_item_pformat,
                            table_format,
                           )

class Command():
    '''
    Registry of decorated cmdlets, keyed by function name
    '''
    KINDS = ('printable', 'printable_table', 'simple')

    def __init__(self):
        self._funcs = dict() # key=name value=(kind, func)

    def __getattr__(self, name):
        if name not in self.KINDS:
            raise AttributeError("'%s' object has no attribute '%s'" % (type(self).__name__, name))
        return functools.partial(self._register, name)

    def _register(self, kind, func):
        name = func.__name__
        if name.startswith('_'):
            raise ValueError("may not expose private function %r" % name)
        if name in self._funcs:
            raise ValueError("duplicate command %r" % name)
        self._funcs[name] = (kind, func)
        return func

    @property
    def actions(self):
        '''
        Sorted action names
        '''
        return sorted(self._funcs)

    def commands(self, kinds=None):
        '''
        dict of name -> func, optionally limited to the given kind(s)
        '''
        if isinstance(kinds, str):
            kinds = (kinds,)
        return {name : func for name, (kind, func) in self._funcs.items() if (kinds is None) or (kind in kinds)}

    def handle(self, name, kinds, obj, **kwargs):
        '''
        Invoke action name on obj if it was registered with one of kinds.
        Returns whether it was invoked. obj must be an instance of
        exactly the class that defines the action.
        '''
        if isinstance(kinds, str):
            kinds = (kinds,)
        kind, func = self._funcs.get(name, (None, None))
        if kind not in kinds:
            return False
        owner = func.__qualname__.rsplit('.', 1)[0]
        if type(obj).__qualname__ != owner:
            return False
        ret = func(obj, **kwargs)
        if kind == 'printable_table':
            self.print(table_format(ret, self._table_columns(ret)))
        elif kind == 'printable':
            self.print(ret)
        return True

    @staticmethod
    def _table_columns(rows):
        '''
        TABLE_COLUMNS of the first row's class, or the keys of a dict row
        '''
        for row in rows:
            cols = getattr(row, 'TABLE_COLUMNS', None)
            if cols:
                return list(cols)
            if isinstance(row, dict):
                return list(row.keys())
            break
        return list()

    @staticmethod
    def print(item):
        '''
        Write item to stdout, one line per element of a list result.
        Goes through the redacting stdout wrapper when one is installed.
        '''
        for x in (item if isinstance(item, (list, set, tuple)) else [item]):
            sys.stdout.write((x if isinstance(x, str) else expand_item_pformat(x, prefix='')) + '\n')
