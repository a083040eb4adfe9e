#
# azcmdlets/paging.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Continuation-token passthrough for list operations.

A facade list method fetches exactly one page for a given continuation
token (next_link) and hands back the token the server supplied.
Callers that want everything walk the pages until the token is exhausted.
'''
import collections

import azure.core.paging
import msrest.paging

from azcmdlets.util import getframename

class CWSkipTransform(Exception):
    '''
    Raised by a transform to indicate that the item must not be
    included in the result.
    '''
    # No specialization here

class PageResult(collections.namedtuple('PageResult', ['items', 'next_link'])):
    '''
    One page of results. next_link is the opaque continuation token
    for the following page, or None when there are no more pages.
    '''
    __slots__ = ()

    def to_dict(self):
        '''
        Return a dict suitable for expand_item()
        '''
        return {'items' : list(self.items),
                'next_link' : self.next_link,
               }

def _transformed(items, transform):
    '''
    Apply transform to each of items, honoring CWSkipTransform
    '''
    if not transform:
        return list(items)
    ret = list()
    for item in items:
        try:
            ret.append(transform(item))
        except CWSkipTransform:
            continue
    return ret

def page_fetch(pager, continuation_token=None, transform=None):
    '''
    Fetch a single page from pager starting at continuation_token.
    pager may be azure.core.paging.ItemPaged (track2), msrest.paging.Paged
    (track1), a PageResult, or any other iterable (one page, no next_link).
    Returns PageResult.
    '''
    if pager is None:
        return PageResult(list(), None)
    if isinstance(pager, PageResult):
        return PageResult(_transformed(pager.items, transform), pager.next_link or None)
    if isinstance(pager, azure.core.paging.ItemPaged):
        page_iterator = pager.by_page(continuation_token=continuation_token or None)
        try:
            page = next(page_iterator)
        except StopIteration:
            return PageResult(list(), None)
        items = _transformed(page, transform)
        return PageResult(items, page_iterator.continuation_token or None)
    if isinstance(pager, msrest.paging.Paged):
        if continuation_token:
            pager.next_link = continuation_token
        try:
            page = pager.advance_page()
        except StopIteration:
            return PageResult(list(), None)
        items = _transformed(page, transform)
        return PageResult(items, pager.next_link or None)
    if isinstance(pager, (str, bytes, dict)):
        raise TypeError("%s: pager may not be %s" % (getframename(0), type(pager).__name__))
    return PageResult(_transformed(pager, transform), None)

def pages_walk(call, *args, **kwargs):
    '''
    Generator. Invoke call(*args, next_link=token, **kwargs) repeatedly,
    yielding each item. The first call has next_link=None. Stop when
    the returned PageResult has no next_link.
    '''
    assert 'next_link' not in kwargs
    next_link = None
    while True:
        page = call(*args, next_link=next_link, **kwargs)
        yield from page.items
        next_link = page.next_link
        if not next_link:
            break

def pages_collect(call, *args, **kwargs):
    '''
    Return pages_walk() expanded to a list
    '''
    return list(pages_walk(call, *args, **kwargs))
