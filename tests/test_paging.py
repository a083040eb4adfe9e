#
# tests/test_paging.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Continuation-token passthrough
'''
import pytest

from azcmdlets.paging import (CWSkipTransform,
                              PageResult,
                              page_fetch,
                              pages_collect,
                              pages_walk,
                             )

from .conftest import item_paged

class TestPageFetch:
    '''
    page_fetch() against the pager flavors the SDKs return
    '''
    def test_item_paged_first_page(self):
        pager = item_paged([1, 2], [3], [4, 5])
        res = page_fetch(pager)
        assert res == PageResult([1, 2], 'page-1')

    def test_item_paged_continues_from_token(self):
        res = page_fetch(item_paged([1, 2], [3], [4, 5]), continuation_token='page-1')
        assert res == PageResult([3], 'page-2')
        res = page_fetch(item_paged([1, 2], [3], [4, 5]), continuation_token='page-2')
        assert res == PageResult([4, 5], None)

    def test_transform_and_skip(self):
        def transform(item):
            if item % 2:
                raise CWSkipTransform()
            return item * 10
        res = page_fetch(item_paged([1, 2, 3, 4]), transform=transform)
        assert res == PageResult([20, 40], None)

    def test_plain_iterable_is_one_page(self):
        assert page_fetch(iter(['a', 'b'])) == PageResult(['a', 'b'], None)
        assert page_fetch(None) == PageResult([], None)

    def test_page_result_passthrough(self):
        res = page_fetch(PageResult(['a'], ''))
        assert res == PageResult(['a'], None)

    def test_rejects_mapping(self):
        with pytest.raises(TypeError):
            page_fetch({'a' : 1})

    def test_to_dict(self):
        assert PageResult(('a',), 'tok').to_dict() == {'items' : ['a'], 'next_link' : 'tok'}

class TestPagesWalk:
    '''
    pages_walk() follows next_link until it runs out
    '''
    def test_walk(self):
        tokens = list()
        def call(prefix, next_link=None):
            tokens.append(next_link)
            return page_fetch(item_paged([prefix+'1'], [prefix+'2'], [prefix+'3']), continuation_token=next_link)
        assert list(pages_walk(call, 'x')) == ['x1', 'x2', 'x3']
        assert tokens == [None, 'page-1', 'page-2']

    def test_collect_single_page(self):
        calls = list()
        def call(next_link=None):
            calls.append(next_link)
            return PageResult(['only'], None)
        assert pages_collect(call) == ['only']
        assert calls == [None]
