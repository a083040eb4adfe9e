#
# tests/test_output.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Redacting stream wrapper
'''
import gc
import io

import pytest

from azcmdlets.output import TextIOWrapperFilter

@pytest.fixture(autouse=True)
def redactions():
    TextIOWrapperFilter.redactions_reset()
    yield
    TextIOWrapperFilter.redactions_reset()

class TestTextIOWrapperFilter:
    '''
    TextIOWrapperFilter
    '''
    def test_redacts_writes(self):
        stream = io.StringIO()
        wrapper = TextIOWrapperFilter(stream)
        TextIOWrapperFilter.add_redaction('kv/s1', 'hunter2')
        wrapper.write('password=hunter2\n')
        wrapper.writelines(['a ', 'hunter2'])
        assert stream.getvalue() == 'password=REDACTED:kv/s1\na REDACTED:kv/s1'

    def test_dropped_wrapper_leaves_stream_open(self):
        stream = io.StringIO()
        wrapper = TextIOWrapperFilter(stream)
        wrapper.write('x')
        del wrapper
        gc.collect()
        assert not stream.closed
        stream.write('still usable')
        assert stream.getvalue() == 'xstill usable'

    def test_close_leaves_stream_open(self):
        stream = io.StringIO()
        wrapper = TextIOWrapperFilter(stream)
        wrapper.close()
        assert not wrapper.closed
        assert not stream.closed

    def test_other_attributes_pass_through(self):
        stream = io.StringIO()
        wrapper = TextIOWrapperFilter(stream)
        wrapper.write('abc')
        assert wrapper.getvalue() == 'abc'
