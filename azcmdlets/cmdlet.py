#
# azcmdlets/cmdlet.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Shared machinery for service cmdlets.

Each service module provides:
  - a facade class with one method per REST operation
  - presentation models (subclasses of PresentationModel)
  - Manager, a subclass of ServiceManager whose decorated
    methods are the cmdlets
Run a service module to invoke a cmdlet:
  python -m azcmdlets.<service> <action> [--option value ...]
'''
import enum
import functools
import inspect
import threading

import azure.identity

import azcmdlets
import azcmdlets.base_defaults
import azcmdlets.clouds
from azcmdlets.btypes import EnumMixin
from azcmdlets.command import Command
import azcmdlets.common
from azcmdlets.exceptions import (ApplicationExit,
                                  ParameterSetError,
                                 )
from azcmdlets.msapicall import (AzCredentialAdapter,
                                 Caught,
                                 client_is_track2,
                                 msapicall,
                                 msapiwrap,
                                )
from azcmdlets.paging import (CWSkipTransform,
                              PageResult,
                              page_fetch,
                              pages_walk,
                             )
from azcmdlets.parametersets import parameter_set_select
from azcmdlets.util import (RE_UUID_ABS,
                            getframe,
                            getframename,
                            json_or_file_load,
                            stringlist_normalize,
                            truthy,
                           )

class AzCred(EnumMixin, enum.Enum):
    '''
    Magic values that may be placed in a client_id list to indicate
    things that are not UAMI client_ids.
    '''
    LOGIN = 'login'
    SYSTEM_ASSIGNED = 'system-assigned'

def _attr_path_get(obj, path):
    '''
    path is a dotted attribute path such as 'properties.state'.
    Return the value at that path or None if any hop is missing.
    SDK dicts (additional_properties and the like) are walked by key.
    '''
    ret = obj
    for name in path.split('.'):
        if ret is None:
            return None
        if isinstance(ret, dict):
            ret = ret.get(name, None)
        else:
            ret = getattr(ret, name, None)
    return ret

class PresentationModel():
    '''
    Display wrapper around an SDK wire model.
    Subclasses define FIELDS: each entry is either a name that is
    read from the SDK object with the same name, or a tuple
    (name, dotted_path) to rename/flatten.
    The SDK object is kept as .sdk for callers that need the raw model.
    '''
    FIELDS = ()
    TABLE_COLUMNS = ()

    def __init__(self, sdk=None, **kwargs):
        self.sdk = sdk
        for name in self.field_names():
            setattr(self, name, kwargs.pop(name, None))
        if kwargs:
            raise TypeError("%s: unexpected keyword arguments %s" % (type(self).__name__, ','.join(sorted(kwargs.keys()))))

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ', '.join("%s=%r" % (k, getattr(self, k)) for k in self.field_names()))

    def __eq__(self, other):
        if type(self) is not type(other): # pylint: disable=unidiomatic-typecheck
            return NotImplemented
        return self.to_dict() == other.to_dict()

    __hash__ = None

    @classmethod
    def field_names(cls):
        '''
        Return the names of the presentation fields in order
        '''
        return [x[0] if isinstance(x, tuple) else x for x in cls.FIELDS]

    @classmethod
    def from_sdk(cls, obj):
        '''
        Build from an SDK object. Attributes missing on obj become None.
        Returns None for None.
        '''
        if obj is None:
            return None
        kwargs = dict()
        for field in cls.FIELDS:
            if isinstance(field, tuple):
                name, path = field
            else:
                name = path = field
            kwargs[name] = _attr_path_get(obj, path)
        return cls(sdk=obj, **kwargs)

    @classmethod
    def from_sdk_list(cls, objs):
        '''
        from_sdk() applied to each of objs
        '''
        return [cls.from_sdk(x) for x in objs]

    def to_dict(self):
        '''
        Return the presentation fields as a dict.
        '''
        return {k : getattr(self, k) for k in self.field_names()}

class CallWrappers():
    '''
    Call wrappers shared by facades and managers.
    GET-like operations return None rather than raising an
    exception when the resource does not exist.
    Users provide self.logger.
    '''
    def _cw_call(self, call, *args, **kwargs):
        '''
        Plain call through msapicall
        '''
        return msapicall(self.logger, call, *args, **kwargs)

    def _cw_get(self, call, *args, **kwargs):
        '''
        Rewrap a generic operation that raises on missing-like errors
        and instead returns None.
        '''
        try:
            return msapicall(self.logger, call, *args, **kwargs)
        except Exception as exc:
            caught = Caught(exc)
            if caught.is_missing():
                return None
            raise

    def _cw_list(self, call, *args, transform=None, **kwargs):
        '''
        Rewrap a generic operation that lists something.
        The underlying SDK op returns an iterator (typically ItemPaged or Paged).
        Generating the iterator and expanding it to a list both happen
        inside msapicall, because pages are fetched while iterating.

        When the parent of the list does not exist, this operation returns an empty list.

        transform is an optional callable that takes an item intended
        for the result list. The return value is what is placed in the
        result list. transform may indicate that an object must not be
        included in the result by raising CWSkipTransform.
        '''
        def _doit(transform, call, *args, **kwargs):
            '''
            Create the iterator and expand it to a list.
            '''
            pager = call(*args, **kwargs)
            if not pager:
                return list()
            res = list()
            for item in pager:
                if transform:
                    try:
                        res.append(transform(item))
                    except CWSkipTransform:
                        continue
                else:
                    res.append(item)
            return res
        try:
            return msapicall(self.logger, functools.partial(_doit, transform, call, *args, **kwargs))
        except Exception as exc:
            caught = Caught(exc)
            if caught.is_missing():
                return list()
            raise

    def _cw_page(self, call, *args, next_link=None, transform=None, **kwargs):
        '''
        Fetch exactly one page of a list operation starting at next_link.
        Returns PageResult. The next_link of the result is what the server
        handed back; pass it to the next call to continue.
        When the parent of the list does not exist, the result is an empty final page.
        '''
        def _doit(transform, next_link, call, *args, **kwargs):
            '''
            Create the pager and fetch one page from it.
            '''
            pager = call(*args, **kwargs)
            return page_fetch(pager, continuation_token=next_link, transform=transform)
        try:
            return msapicall(self.logger, functools.partial(_doit, transform, next_link, call, *args, **kwargs))
        except Exception as exc:
            caught = Caught(exc)
            if caught.is_missing():
                return PageResult(list(), None)
            raise

    @staticmethod
    def _pages(call, *args, next_link=None, **kwargs):
        '''
        Facade list helper: with next_link (or walk=False) return one
        PageResult; otherwise walk all pages and return a list.
        '''
        walk = kwargs.pop('walk', True)
        if next_link or (not walk):
            return call(*args, next_link=next_link, **kwargs)
        return list(pages_walk(call, *args, **kwargs))

class ServiceFacade(CallWrappers):
    '''
    Base class for per-service facades. client is the SDK client.
    Each facade method maps directly to one SDK operation.
    '''
    def __init__(self, client, logger, exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
        self.client = client
        self.logger = logger
        self.exc_value = exc_value

    def __repr__(self):
        return "<%s,%s,%r>" % (type(self).__name__, hex(id(self)), self.client)

    @classmethod
    def mth(cls):
        '''
        Return a string of the form "Blah.x" where Blah is the name of this class
        and x is the frame name of the caller.
        '''
        return "%s.%s" % (cls.__name__, getframename(1))

class ServiceManager(azcmdlets.common.ApplicationWithResourceGroup, CallWrappers):
    '''
    Base class for the per-service Manager classes.
    Provides credential selection, cloud selection, and cached
    SDK client generation. Decorated methods of subclasses are the cmdlets.

    Cmdlet parameters are declared in ACTION_ARGS as (name, add_argument_kwargs).
    They are not constructor arguments; main_execute() passes them
    to the action that accepts them.
    '''
    def __init__(self, client_id=None, cloud_name='', **kwargs):
        super().__init__(**kwargs)
        self.client_id = client_id
        self.cloud_name = cloud_name or ''
        self._az_client_gen_lock = threading.RLock()
        self._az_cachedclients = dict() # key=(name, subscription_id) value=client
        self._cloud_obj = None

    def __repr__(self):
        return "<%s,subscription_id=%r>" % (type(self).__name__, self.subscription_id)

    # Unit tests force _AZ_CLIENT_GEN_MOUSETRAP to True so we can catch
    # cases where test code accidently tries to talk to Azure rather than the mocks.
    _AZ_CLIENT_GEN_MOUSETRAP = False

    ######################################################################
    # cloud

    @property
    def cloud(self):
        '''
        Getter for cloud descriptor (msrestazure.azure_cloud.Cloud)
        '''
        if self._cloud_obj is None:
            cloud_name = self.cloud_name or azcmdlets.scfg.get('cloud_name', '')
            self._cloud_obj = azcmdlets.clouds.cloud_get(cloud_name, exc_value=self.exc_value)
        return self._cloud_obj

    ######################################################################
    # credentials

    def client_ids_get(self, client_id=None):
        '''
        Return the list of credential specs to use.
        client_id may be a list, a comma-separated string, or a single value.
        Each spec is AzCred or a UUID-as-string (user-assigned managed identity).
        Nothing given means az login credentials.
        '''
        client_id = client_id or self.client_id or azcmdlets.scfg.get('client_id_default', '')
        if isinstance(client_id, AzCred):
            client_id = client_id.value
        elif isinstance(client_id, (list, tuple)):
            client_id = [x.value if isinstance(x, AzCred) else x for x in client_id]
        ret = list()
        for x in stringlist_normalize(client_id):
            x = x.strip()
            if x.lower() in AzCred.values():
                spec = AzCred(x.lower())
            elif RE_UUID_ABS.search(x):
                spec = x.lower()
            else:
                raise self.exc_value("invalid client_id %r" % x)
            if spec not in ret:
                ret.append(spec)
        if not ret:
            ret.append(AzCred.LOGIN)
        return ret

    def _credential_from_spec(self, spec):
        '''
        spec describes a credential
          AzCred.LOGIN: az login credential
          AzCred.SYSTEM_ASSIGNED: system-assigned identity
          UUID-as-string: user-assigned identity with this client_id
        '''
        if spec == AzCred.LOGIN:
            return azure.identity.AzureCliCredential()
        if spec == AzCred.SYSTEM_ASSIGNED:
            return azure.identity.ManagedIdentityCredential()
        return azure.identity.ManagedIdentityCredential(client_id=spec)

    def azure_credential_generate(self, client_id=None):
        '''
        Generate and return an appropriate credential object.
        More than one spec generates a ChainedTokenCredential.
        '''
        specs = self.client_ids_get(client_id=client_id)
        credentials = [self._credential_from_spec(spec) for spec in specs]
        if self.debug:
            self.logger.debug("%s generated %s", self.mth(), [x.value if isinstance(x, AzCred) else x for x in specs])
        if len(credentials) > 1:
            return azure.identity.ChainedTokenCredential(*credentials)
        return credentials[0]

    ######################################################################
    # SDK client generation

    def _get_client_from_cli_profile(self, client_class, subscription_id=None, **kwargs):
        '''
        Instantiate an SDK management client object of the given client_class.
        Track1 clients get the credential through AzCredentialAdapter.
        '''
        base_url = kwargs.pop('base_url', None) or self.cloud.endpoints.resource_manager
        credential = kwargs.pop('credential', None) or self.azure_credential_generate()
        if not client_is_track2(client_class):
            resource_url = base_url.rstrip('/') + '/.default'
            credential = AzCredentialAdapter(self.logger, credential, resource_url)
        parameters = {'base_url' : base_url,
                      'credential' : credential,
                      'credentials' : credential,
                      'subscription_id' : subscription_id or self.subscription_id,
                     }
        if self.tenant_id:
            parameters['tenant_id'] = self.tenant_id
        if client_is_track2(client_class):
            parameters['credential_scopes'] = [base_url.rstrip('/') + '/.default']
        parameters.update(kwargs)
        return self._instantiate_client(client_class, **parameters)

    @staticmethod
    def _instantiate_client(target_class, **kwargs):
        '''
        Instantiate target_class. Extract positional arguments
        from kwargs and get them in the right order. Matches
        strictly by name. Silently discards anything in kwargs
        that does not match in target_class unless target_class
        accepts **kwargs.
        '''
        signature = inspect.signature(target_class)
        cli_args_all = set(signature.parameters.keys())
        var_keyword = any(param.kind == inspect.Parameter.VAR_KEYWORD for param in signature.parameters.values())
        cli_args_positional = [name for name, param in signature.parameters.items() if param.default is inspect.Parameter.empty and param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)]
        use_args = list()
        for key in cli_args_positional:
            assert isinstance(key, str)
            if key not in kwargs:
                raise ValueError("missing argument %r" % key)
            use_args.append(kwargs.pop(key))
        # Discard unwanted kwargs. Track2 clients swallow **kwargs into the
        # pipeline config, so only pass through the ones that are known to work.
        passthrough = ('credential_scopes',) if var_keyword else ()
        use_kwargs = {k : v for k, v in kwargs.items() if (k in cli_args_all) or (k in passthrough)}
        return target_class(*use_args, **use_kwargs)

    def _az_client_gen_do(self, client_class, subscription_id=None, **kwargs):
        '''
        Factory for Azure SDK client of type client_class.
        '''
        assert not self._AZ_CLIENT_GEN_MOUSETRAP
        ret = self._get_client_from_cli_profile(client_class, subscription_id=subscription_id, **kwargs)
        return msapiwrap(self.logger, ret)

    def _az_client_gen_property(self, name, client_class, subscription_id=None, **kwargs):
        '''
        Generate the client named name, caching the result
        so it may be reused later. Clients are cached per subscription.
        Tests pre-populate the cache with mocks using az_client_set().
        '''
        subscription_id = azcmdlets.subscription_mapper.effective(subscription_id) or self.subscription_id
        key = (name, (subscription_id or '').lower())
        with self._az_client_gen_lock:
            ret = self._az_cachedclients.get(key, None)
            if ret is None:
                ret = self._az_client_gen_do(client_class, subscription_id=subscription_id, **kwargs)
                self._az_cachedclients[key] = ret
            return ret

    def az_client_set(self, name, client, subscription_id=None):
        '''
        Place client in the cache used by _az_client_gen_property()
        '''
        subscription_id = subscription_id or self.subscription_id
        with self._az_client_gen_lock:
            self._az_cachedclients[(name, (subscription_id or '').lower())] = client

    ######################################################################
    # parameter sets

    def parameter_set_select(self, sets, given, default=None):
        '''
        Wrapper around azcmdlets.parametersets.parameter_set_select()
        that logs the selection.
        '''
        ps = parameter_set_select(sets, given, default=default)
        self.logger.debug("%s selected parameter set %s", getframe(1), ps.name)
        return ps

    ######################################################################
    # parameter normalization shared by the services

    def bool_optional(self, value, key='value'):
        '''
        Tri-state boolean parameter. None and '' stay None.
        Strings from the command line go through truthy().
        '''
        if value is None or value == '':
            return None
        try:
            return truthy(value)
        except (TypeError, ValueError) as exc:
            raise self.exc_value("invalid %s %r" % (key, value)) from exc

    def tags_normalize(self, tags):
        '''
        Tags as a dict or None
        '''
        ret = json_or_file_load(tags, key='tags', exc_value=self.exc_value)
        if (ret is not None) and (not isinstance(ret, dict)):
            raise self.exc_value("tags must be a JSON object")
        return ret

    ######################################################################
    # main stuff below here

    ACTION_ARGS = ()
    ACTION_ARGS_GROUP = 'cmdlet'

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        See azcmdlets.Application.main_add_parser_args()
        '''
        super().main_add_parser_args(ap_parser)

        ap_parser.add_argument('action', type=str,
                               help='what to do')

        group = ap_parser.get_argument_group('azure')
        group.add_argument('--client_id', type=str, default='',
                           help="credentials: 'login', 'system-assigned', or managed identity client_id; comma-separate to chain")
        group.add_argument('--cloud_name', type=str, default='',
                           help='Azure cloud name (default from configuration, otherwise %s)' % azcmdlets.base_defaults.CLOUD_NAME_DEFAULT)

        group = ap_parser.get_argument_group(cls.ACTION_ARGS_GROUP)
        for name, kwargs in cls.ACTION_ARGS:
            kwargs = dict(kwargs)
            if kwargs.get('action', None) not in ('store_true', 'append'):
                kwargs.setdefault('type', str)
            kwargs.setdefault('default', None)
            group.add_argument('--'+name, **kwargs)

    @classmethod
    def args_process(cls, args_dict):
        '''
        See azcmdlets.Application.args_process().
        ACTION_ARGS are saved along with ARGS_SAVE.
        '''
        args_dict, args_saved = super().args_process(args_dict)
        for name, _ in cls.ACTION_ARGS:
            if name in args_dict:
                args_saved[name] = args_dict.pop(name)
        return (args_dict, args_saved)

    ARGS_SAVE = ('action',)

    command = None

    HANDLERS = Command.KINDS

    def action_kwargs(self, action):
        '''
        Return the saved cmdlet parameters accepted by the named action
        '''
        func = self.command.commands().get(action, None)
        if not func:
            return dict()
        params = inspect.signature(func).parameters
        return {k : v for k, v in self._args_saved.items() if (k in params) and (k != 'action')}

    def main_execute(self):
        '''
        See azcmdlets.Application.main_execute()
        '''
        action = self._args_saved['action']
        try:
            if self.command.handle(action, self.HANDLERS, self, **self.action_kwargs(action)):
                raise ApplicationExit(0)
        except ParameterSetError as exc:
            self.logger.error("%s: %s", action, exc)
            raise ApplicationExit(1) from exc
        self.logger.error("Unknown action '%s'", action)
        self.logger.info("known actions: %s", ' '.join(self.command.actions))
        raise ApplicationExit(1)
