#
# azcmdlets/util.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Helpers shared across the cmdlet modules: argument parsing,
output formatting, parameter normalization and OData filters.
'''
import argparse
import datetime
import enum
import inspect
import json
import logging
import os
import pprint
import re
import sys
import uuid

import dateutil.parser
import dateutil.tz
import tabulate

from azcmdlets.base_defaults import (EXC_VALUE_DEFAULT,
                                     PF,
                                    )

def re_abs(txt):
    '''
    Anchor regexp text at both ends
    '''
    return '^' + txt + r'\Z'

RE_UUID_TXT = r'([0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12})'
RE_UUID_ABS = re.compile(re_abs(RE_UUID_TXT))

UUID_ZERO = str(uuid.UUID(int=0))

######################################################################
# argparse

class ArgExplicit(argparse.Action):
    '''
    action= for arguments whose defaults come from the subscription
    config. Records the dest in namespace.args_explicit so the
    config does not override what was typed.
    '''
    def __call__(self, parser, namespace, value, option_string=None):
        setattr(namespace, self.dest, value)
        explicit = getattr(namespace, 'args_explicit', None)
        if explicit is None:
            namespace.args_explicit = {self.dest}
        else:
            explicit.add(self.dest)

class ArgumentParser(argparse.ArgumentParser):
    '''
    Adds get_argument_group() so that base classes and
    subclasses can share a group by title.
    '''
    def get_argument_group(self, title, *args, **kwargs):
        for group in self._action_groups:
            if group.title == title:
                return group
        return self.add_argument_group(title, *args, **kwargs)

def log_level_normalize(log_level):
    '''
    logging level from an int, a digit string, or a name like 'debug'
    '''
    if isinstance(log_level, bool) or (not isinstance(log_level, (int, str))):
        raise TypeError("invalid log_level type %s" % type(log_level).__name__)
    if isinstance(log_level, int):
        return log_level
    txt = log_level.strip()
    if txt.isdigit():
        return int(txt)
    ret = logging.getLevelName(txt.upper())
    if not isinstance(ret, int):
        raise ValueError("invalid log_level %r" % log_level)
    return ret

def getframename(idx):
    '''
    Function name idx frames above the caller (0 = the caller)
    '''
    return sys._getframe(idx+1).f_code.co_name # pylint: disable=protected-access

def getframe(idx):
    '''
    As getframename(), but 'name:lineno'
    '''
    f = sys._getframe(idx+1) # pylint: disable=protected-access
    return "%s:%s" % (f.f_code.co_name, f.f_lineno)

######################################################################
# output formatting

_SCALAR_TYPES = (bool, bytes, complex, datetime.date, datetime.timedelta, float, int, str)

def expand_item(item, _seen=frozenset()):
    '''
    Turn item into plain dicts, lists and scalars for printing.
    Objects with to_dict() (presentation models, SDK models) use it;
    other objects use vars().
    '''
    if (item is None) or isinstance(item, _SCALAR_TYPES):
        return item
    if isinstance(item, enum.Enum):
        return item.value
    if id(item) in _seen:
        return "SEEN %r" % item
    if isinstance(item, logging.Logger) or inspect.isclass(item) or inspect.isroutine(item) or inspect.ismodule(item):
        return repr(item)
    seen = _seen | {id(item)}
    if callable(getattr(item, 'to_dict', None)):
        item = item.to_dict()
    if isinstance(item, (list, set, frozenset, tuple)):
        ret = [expand_item(x, seen) for x in item]
        return tuple(ret) if isinstance(item, tuple) else ret
    if not isinstance(item, dict):
        try:
            item = vars(item)
        except TypeError:
            return repr(item)
    return {str(k) : expand_item(v, seen) for k, v in item.items()}

def expand_item_pformat(item, prefix=PF):
    '''
    pprint.pformat(expand_item(item)) with prefix on every line
    '''
    txt = pprint.pformat(expand_item(item))
    return '\n'.join(prefix + line for line in txt.splitlines())

def table_format(rows, headers, tablefmt='simple'):
    '''
    Render rows (dicts or objects) as a table of the named columns
    '''
    def _cell(row, name):
        return row.get(name, None) if isinstance(row, dict) else getattr(row, name, None)
    return tabulate.tabulate([[_cell(row, h) for h in headers] for row in rows], headers=headers, tablefmt=tablefmt)

######################################################################
# parameter normalization

def truthy(value):
    '''
    bool from a command-line style value. Raises on anything unrecognized.
    '''
    if isinstance(value, (bool, int)):
        return bool(value)
    if not isinstance(value, str):
        raise TypeError("cannot determine truthiness of %s" % type(value).__name__)
    lv = value.strip().lower()
    if lv in ('true', 'yes', 'on', '1'):
        return True
    if lv in ('false', 'no', 'off', '0'):
        return False
    raise ValueError("cannot determine truthiness of %r" % value)

def stringlist_normalize(data):
    '''
    Flatten a str or list of comma-separated strs into a list of non-empty strs
    '''
    if not data:
        return list()
    if not isinstance(data, str):
        data = ','.join(data)
    return [x for x in data.split(',') if x]

def uuid_normalize(val, key='uuid', exc_value=EXC_VALUE_DEFAULT) -> str:
    '''
    Canonical (lower-case, hyphenated) text of val, which may be
    str, bytes or uuid.UUID. With exc_value=None, '' on failure.
    '''
    try:
        if isinstance(val, uuid.UUID):
            return str(val)
        if isinstance(val, str):
            return str(uuid.UUID(val.strip()))
        if isinstance(val, bytes):
            return str(uuid.UUID(bytes=val))
        err = "unexpected type %s" % type(val).__name__
    except ValueError as exc:
        err = repr(exc)
    if exc_value:
        raise exc_value("invalid %s: %s" % (key, err))
    return ''

def value_given(value):
    '''
    None and '' mean not given; False and 0 are given
    '''
    return not ((value is None) or (value == ''))

def json_or_file_load(value, key='value', exc_value=EXC_VALUE_DEFAULT):
    '''
    value is one of:
      - None/'': return None
      - a dict or list: returned as-is
      - a path to an existing file: the file contents parsed as JSON
      - otherwise: value parsed as JSON text
    '''
    if not value_given(value):
        return None
    if isinstance(value, (dict, list)):
        return value
    if not isinstance(value, str):
        raise TypeError("%s: unexpected type %s" % (key, type(value)))
    if os.path.isfile(value):
        try:
            with open(value, 'r') as f:
                return json.load(f)
        except (OSError, ValueError) as exc:
            raise exc_value("%s: cannot load %r: %r" % (key, value, exc)) from exc
    try:
        return json.loads(value)
    except ValueError as exc:
        raise exc_value("%s: neither a file nor valid JSON: %r" % (key, exc)) from exc

def text_or_file_load(value, path, key='value', exc_value=EXC_VALUE_DEFAULT):
    '''
    Return the text content given either inline (value) or
    by naming a file (path). Exactly one may be given.
    '''
    if value_given(value) and value_given(path):
        raise exc_value("only one of %s or %s_file_path may be specified" % (key, key))
    if value_given(path):
        try:
            with open(path, 'r') as f:
                return f.read()
        except OSError as exc:
            raise exc_value("%s: cannot read %r: %r" % (key, path, exc)) from exc
    if value_given(value):
        return value
    return None

def datetime_normalize(value, key='datetime', exc_value=EXC_VALUE_DEFAULT):
    '''
    Return value as an aware datetime.datetime.
    None and '' become None. Strings are parsed by dateutil.
    A naive value is taken to be UTC.
    '''
    if not value_given(value):
        return None
    if isinstance(value, str):
        try:
            value = dateutil.parser.parse(value)
        except (ValueError, OverflowError) as exc:
            raise exc_value("invalid %s %r: %r" % (key, value, exc)) from exc
    if not isinstance(value, datetime.datetime):
        raise exc_value("invalid %s type %s" % (key, type(value).__name__))
    if value.tzinfo is None:
        value = value.replace(tzinfo=dateutil.tz.UTC)
    return value

def odata_and(*clauses):
    '''
    Join the non-empty OData clauses with 'and'. Returns None when there are none.
    '''
    clauses = [x for x in clauses if x]
    return ' and '.join(clauses) if clauses else None

def odata_eq(path, value):
    '''
    OData equality clause, or None when value is not given.
    Quotes in value are doubled, as OData string literals require.
    '''
    if not value:
        return None
    return "%s eq '%s'" % (path, str(value).replace("'", "''"))

def odata_time(path, op, value):
    '''
    OData datetime comparison, or None when value is not given
    '''
    if value is None:
        return None
    return "%s %s %s" % (path, op, value.isoformat())
