#
# azcmdlets/output.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Redacting wrappers for sys.stdout and sys.stderr.
Secret values registered with output_redact() (KeyVault secret values,
certificate passwords) are replaced with REDACTED:<key> on the way out.
'''
import io
import sys
import threading

from azcmdlets.util import getframename

_capture_lock = threading.Lock()
_saved_streams = dict() # key=name in sys value=original stream

def capture():
    '''
    Wrap sys.stdout and sys.stderr with TextIOWrapperFilter.
    Thread-safe and idempotent.
    '''
    with _capture_lock:
        for name in ('stderr', 'stdout'):
            if name not in _saved_streams:
                stream = getattr(sys, name)
                _saved_streams[name] = stream
                setattr(sys, name, TextIOWrapperFilter(stream))

def uncapture_for_pytest():
    '''
    Undo capture(). pytest swaps sys.stdout/sys.stderr per test
    and trips over wrappers left behind (pytest-dev/pytest#5502).
    '''
    with _capture_lock:
        for name, stream in _saved_streams.items():
            setattr(sys, name, stream)
        _saved_streams.clear()

class TextIOWrapperFilter(io.TextIOWrapper):
    '''
    Stands in for one text stream. write() and writelines()
    apply the redactions; everything else passes through.
    Redactions are shared by every wrapped stream.
    The wrapped stream is borrowed: close() and finalization
    leave it open.
    '''
    def __init__(self, wrapped_obj): # pylint: disable=super-init-not-called
        assert not isinstance(wrapped_obj, type(self))
        self._azcmdlets_wrapped = wrapped_obj
        self.azcmdlets_rawwrite = wrapped_obj.write

    AZCMDLETS_PRIVATE_ATTRS = ('AZCMDLETS_PRIVATE_ATTRS',
                               '__del__',
                               '_azcmdlets_wrapped',
                               '_redact_lock',
                               '_redactions',
                               'add_redaction',
                               'azcmdlets_rawwrite',
                               'close',
                               'closed',
                               'redact',
                               'redactions_reset',
                               'write',
                               'writelines',
                              )

    def __del__(self):
        # Replaces IOBase finalization, which would close the wrapped stream.
        pass

    def close(self):
        pass

    @property
    def closed(self):
        return self._azcmdlets_wrapped.closed

    _redact_lock = threading.Lock()
    _redactions = list() # (value, key); longest value first so a secret embedded in another is not split

    @classmethod
    def add_redaction(cls, key, value):
        '''
        From now on, replace value with REDACTED:key
        '''
        if not (isinstance(key, str) and key):
            raise ValueError("invalid redaction key %r" % key)
        if not isinstance(value, str):
            raise TypeError("redaction value must be str, not %s" % type(value).__name__)
        with cls._redact_lock:
            if (value, key) not in cls._redactions:
                cls._redactions.append((value, key))
                cls._redactions.sort(key=lambda x: (-len(x[0]), x[0], x[1]))

    @classmethod
    def redactions_reset(cls):
        '''
        Forget all redactions
        '''
        with cls._redact_lock:
            cls._redactions.clear()

    @classmethod
    def redact(cls, txt):
        '''
        Return txt with every registered value replaced
        '''
        for value, key in cls._redactions:
            txt = txt.replace(value, 'REDACTED:' + key)
        return txt

    def __getattribute__(self, name):
        if name in super().__getattribute__('AZCMDLETS_PRIVATE_ATTRS'):
            return super().__getattribute__(name)
        return getattr(self._azcmdlets_wrapped, name)

    def __setattr__(self, name, value):
        if name in super().__getattribute__('AZCMDLETS_PRIVATE_ATTRS'):
            super().__setattr__(name, value)
        else:
            setattr(self._azcmdlets_wrapped, name, value)

    def write(self, b):
        if not isinstance(b, str):
            raise TypeError("%s() argument must be str, not %s" % (getframename(0), type(b).__name__))
        return self.azcmdlets_rawwrite(self.redact(b))

    def writelines(self, lines):
        self.write(''.join(lines))

def output_redact(key, value):
    '''
    Register value for redaction in everything written to stdout/stderr.
    key says what was redacted: output_redact('kv/secret1', 'abcde')
    turns 'abcde' into 'REDACTED:kv/secret1'.
    '''
    if value:
        TextIOWrapperFilter.add_redaction(key, value)
