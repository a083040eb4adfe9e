#
# azcmdlets/msapicall.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Every SDK call made by a facade goes through msapicall().

Failures surface as the innermost exception of the SDK's
inner_exception chain, with the outer one as __cause__.
Nothing here retries; the SDK pipeline retry policy owns
throttling and transient errors.

Track1 (msrest) clients are wrapped in OperationsWrapper so that
calls on their operations groups go through msapicall() too.
'''
import functools
import http.client

import azure.common
import azure.core.exceptions
import azure.core.pipeline
import azure.core.pipeline.policies
import azure.core.pipeline.transport
import defusedxml
from defusedxml import ElementTree
import knack.util
import msrest.authentication
import msrest.exceptions
import msrest.paging
import msrest.service_client
import msrestazure.azure_exceptions
import requests.exceptions
import urllib3.exceptions

URLLIB3_SDK_EXCEPTIONS = (urllib3.exceptions.HTTPError,
                          urllib3.exceptions.HTTPWarning,
                          requests.exceptions.ConnectionError,
                         )

AZURE_SDK_EXCEPTIONS = (azure.core.exceptions.HttpResponseError,
                        knack.util.CLIError,
                        msrestazure.azure_exceptions.CloudError,
                        msrest.exceptions.ClientException,
                       ) + URLLIB3_SDK_EXCEPTIONS

INNER_EXCEPTION_DEPTH_MAX = 32

def innermost_exception(exc):
    '''
    Last exception on the inner_exception chain of exc (exc if none)
    '''
    ret = exc
    for _ in range(INNER_EXCEPTION_DEPTH_MAX):
        inner = getattr(ret, 'inner_exception', None)
        if (not isinstance(inner, BaseException)) or (inner is ret):
            break
        ret = inner
    return ret

class Caught():
    '''
    Classify an exception from an SDK call. The is_* predicates
    answer the questions callers ask; reason() names the first
    one that holds.
    '''
    def __init__(self, exc):
        self.exc = exc
        status = getattr(exc, 'status_code', None)
        if status is None:
            status = getattr(getattr(exc, 'response', None), 'status_code', None)
        self.status_code = status
        try:
            self.status_code_int = int(status)
        except (TypeError, ValueError):
            self.status_code_int = -1
        self.codes = list()
        if not isinstance(exc, URLLIB3_SDK_EXCEPTIONS):
            self._codes_collect()

    def _codes_collect(self):
        '''
        Error codes live in different places depending on the SDK generation:
          azure-core: exc.error_code or exc.error.code
          msrest: exc.error.error
          storage-style: <Code> in an XML body embedded in str(exc)
        '''
        exc = self.exc
        error = getattr(exc, 'error', None)
        for val in (getattr(exc, 'error_code', None),
                    getattr(error, 'code', None),
                    getattr(error, 'error', None),
                   ):
            if val:
                self._code_add(str(val))
        txt = str(exc)
        idx = txt.find('<?xml')
        if idx >= 0:
            try:
                root = ElementTree.fromstring(''.join(txt[idx:].strip().splitlines()))
            except (ElementTree.ParseError, defusedxml.DefusedXmlException):
                return
            for code in root.findall('Code'):
                if code.text:
                    self._code_add(code.text)

    def _code_add(self, code):
        code = code.lower()
        if code not in self.codes:
            self.codes.append(code)

    @property
    def error_code(self):
        '''
        First error code found (lower case), or None
        '''
        return self.codes[0] if self.codes else None

    def any_code_matches(self, *args):
        '''
        Return whether any of args (case-insensitive) is an error code of this exception
        '''
        return any(code.lower() in self.codes for code in args)

    def is_missing(self):
        '''
        The resource (or its parent) does not exist
        '''
        if self.status_code_int == http.client.NOT_FOUND:
            return True
        if isinstance(self.exc, (azure.common.AzureMissingResourceHttpError,
                                 azure.core.exceptions.ResourceNotFoundError,
                                )):
            return True
        return self.any_code_matches('ResourceNotFound', 'ResourceGroupNotFound', 'NotFound')

    def is_conflict(self):
        return (self.status_code_int == http.client.CONFLICT) \
          or isinstance(self.exc, (azure.common.AzureConflictHttpError,
                                   azure.core.exceptions.ResourceExistsError,
                                  ))

    def is_throttle(self):
        return self.status_code_int == http.client.TOO_MANY_REQUESTS

    def is_urllib3(self):
        return isinstance(self.exc, URLLIB3_SDK_EXCEPTIONS)

    def is_server_rejected_auth(self):
        return self.any_code_matches('AuthenticationFailed', 'ExpiredAuthenticationToken')

    REASONS = ('is_server_rejected_auth',
               'is_missing',
               'is_urllib3',
               'is_throttle',
               'is_conflict',
              )

    def reason(self):
        '''
        Name of the first REASONS predicate that holds, or None
        '''
        for name in self.REASONS:
            if getattr(self, name)():
                return name
        return None

def msapicall(logger, op, *args, **kwargs):
    '''
    Return op(*args, **kwargs), rewrapped by msapiwrap().
    On failure, raise the innermost exception chained from the outer one.
    '''
    try:
        ret = op(*args, **kwargs)
    except Exception as exc:
        inner = innermost_exception(exc)
        if inner is exc:
            raise
        logger.debug("msapicall op=%r unwrapped %s to %r", op, type(exc).__name__, inner)
        raise inner from exc
    return msapiwrap(logger, ret)

def msapiwrap(logger, ret):
    '''
    Rewrap track1 results so later calls on them also go through msapicall().
    azure-core ItemPaged is left alone; its pages are fetched inside the
    caller's msapicall().
    '''
    if isinstance(ret, (AzCredentialAdapter, OperationsWrapper)):
        return ret
    if isinstance(ret, msrest.paging.Paged):
        ret._get_next = _wrapcall(logger, ret._get_next) # pylint: disable=protected-access
        return ret
    if isinstance(ret, msrest.service_client.SDKClient):
        return OperationsWrapper(ret, logger)
    return ret

def _wrapcall(logger, call):
    if (not callable(call)) or (isinstance(call, functools.partial) and (call.func is msapicall)):
        return call
    return functools.partial(msapicall, logger, call)

class OperationsWrapper():
    '''
    Proxy for a track1 client or one of its operations groups.
    Callables read through it are wrapped with msapicall(), and
    operations groups read from a client are proxied in turn.
    Track1 names long-running ops X where track2 uses begin_X;
    begin_X is accepted here for those.
    Local attributes are prefixed '_azc_'.
    '''
    BEGIN_ALIASES = ('create_or_update', 'delete', 'resume', 'update')

    def __init__(self, wrapped, logger):
        self._azc_logger = logger
        self._azc_wrapped = wrapped

    def __repr__(self):
        return "<%s,%s,%r>" % (type(self).__name__, hex(id(self)), self._azc_wrapped)

    def __getattribute__(self, name):
        if name.startswith('_azc_') or (name in ('BEGIN_ALIASES', '_azc_lookup')):
            return super().__getattribute__(name)
        ret = self._azc_lookup(name)
        if name.startswith('_'):
            return ret
        if callable(ret):
            return _wrapcall(self._azc_logger, ret)
        if isinstance(self._azc_wrapped, msrest.service_client.SDKClient) and hasattr(ret, '_client'):
            return OperationsWrapper(ret, self._azc_logger)
        return ret

    def _azc_lookup(self, name):
        wrapped = self._azc_wrapped
        try:
            return getattr(wrapped, name)
        except AttributeError:
            alias = name[len('begin_'):] if name.startswith('begin_') else ''
            if (alias not in self.BEGIN_ALIASES) or (not hasattr(wrapped, alias)):
                raise
        return getattr(wrapped, alias)

    def __setattr__(self, name, value):
        if name.startswith('_azc_'):
            super().__setattr__(name, value)
        else:
            setattr(self._azc_wrapped, name, value)

    def __delattr__(self, name):
        if name.startswith('_azc_'):
            super().__delattr__(name)
        else:
            delattr(self._azc_wrapped, name)

def client_is_track2(client_class):
    '''
    Track1 clients derive from msrest SDKClient; anything else is track2
    '''
    return not issubclass(client_class, msrest.service_client.SDKClient)

class AzCredentialAdapter(msrest.authentication.BasicTokenAuthentication):
    '''
    Presents an azure-identity credential to track1 clients, which
    expect msrest authentication. Track2 clients take the credential
    directly and must not get this.
    Follows https://github.com/jongio/azidext/blob/master/python/azure_identity_credential_adapter.py
    scope is like 'https://management.azure.com/.default'
    '''
    def __init__(self, logger, credential, scope, **kwargs):
        super().__init__(None)
        self.logger = logger
        self._azc_credential = credential
        self._azc_scope = scope
        self._azc_policy = azure.core.pipeline.policies.BearerTokenCredentialPolicy(credential, scope, **kwargs)

    def __repr__(self):
        return "<%s,%s,%r,%r>" % (type(self).__name__, hex(id(self)), self._azc_credential, self._azc_scope)

    def get_token(self, *args, **kwargs):
        return self._azc_credential.get_token(*args, **kwargs)

    def set_token(self):
        '''
        Refresh self.token through msapicall()
        '''
        msapicall(self.logger, self._set_token)

    def _set_token(self):
        # The policy owns the azure-core token cache. Run a throwaway
        # request through it and take the bearer token back out.
        request = azure.core.pipeline.PipelineRequest(azure.core.pipeline.transport.HttpRequest('GET', 'https://azcmdlets.invalid'),
                                                      azure.core.pipeline.PipelineContext(None))
        self._azc_policy.on_request(request)
        self.token = {'access_token' : request.http_request.headers['Authorization'].split(' ', 1)[1]}

    def signed_session(self, session=None):
        self.set_token()
        return super().signed_session(session)
