#!/usr/bin/env python3
#
# azcmdlets/common.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Application scaffolding shared by every cmdlet module:
logging setup, command-line parsing, exit handling, and
subscription/resource group selection.
'''
import argparse
import inspect
import logging
import os
import pprint
import sys
import threading
import traceback

import azcmdlets
from azcmdlets.azresourceid import RE_RESOURCE_GROUP_ABS
from azcmdlets.base_defaults import EXC_VALUE_DEFAULT
from azcmdlets.btypes import LogTo
from azcmdlets.exceptions import ApplicationExit
import azcmdlets.output
import azcmdlets.util
from azcmdlets.util import (ArgExplicit,
                            ArgumentParser,
                            expand_item_pformat,
                            getframename,
                           )

class Application():
    '''
    Base for anything that runs as a command. A subclass adds
    its own arguments in main_add_parser_args() (chaining to super())
    and does its work in main_execute(), which ends by raising
    ApplicationExit with the exit code.
    '''
    def __init__(self,
                 args_explicit=None,
                 debug=0,
                 exc_value=EXC_VALUE_DEFAULT,
                 log_level=None,
                 log_to=None,
                 log_file=None,
                 log_fmt=None,
                 logger=None,
                 **kwargs):
        '''
        debug: extra verbosity beyond logger.debug(); checked as "self.debug > N"
        exc_value: exception class raised for invalid values, both at
                   construction and from cmdlet operations
        log_level, log_to, log_file, log_fmt: only used when logger is None
        '''
        self._cls_init()
        if kwargs:
            bad = ','.join(sorted(kwargs.keys()))
            raise TypeError("%s.__init__() got unexpected keyword argument(s) %s" % (type(self).__name__, bad))
        self.args_explicit = args_explicit or set()
        self._args_saved = None # see args_save()
        self.debug = debug
        self.exc_value = exc_value
        self._log_to = LogTo(log_to if log_to is not None else self.LOG_TO_DEFAULT)
        self._log_level, self._logger = self._logger_create(log_level, logger,
                                                            log_to=self._log_to,
                                                            log_file=log_file,
                                                            log_fmt=log_fmt)

    # Name of the logger shared by every application class
    LOGGER_NAME = 'azcmdlets'

    # Format choices; subclasses pick one by overloading LOG_FORMAT
    LOG_FORMAT_SIMPLE = "%(message)s"
    LOG_FORMAT_LOC = "%(asctime)s %(levelname).3s %(name)s:%(module)s:%(funcName)s:%(lineno)s: %(message)s"
    LOG_FORMAT_TS_LEVEL = "%(asctime)s %(levelname).3s %(message)s"
    LOG_FORMAT_LNAME_LEVEL = "%(name)s %(levelname).3s %(message)s"

    LOG_FORMAT = LOG_FORMAT_SIMPLE

    LOG_LEVEL_DEFAULT = 'info'
    LOG_LEVEL_CHOICES = ('debug', 'info', 'warning', 'error', 'critical')

    LOG_TO_DEFAULT = LogTo.STDOUT.value

    # SDK loggers that are chatty at INFO
    QUIET_LOGGERS = (('azure.identity._internal.decorators', logging.ERROR),
                     ('azure.identity._credentials.chained', logging.ERROR),
                     ('azure.core.pipeline.policies.http_logging_policy', logging.WARNING),
                     ('msrest.universal_http', logging.WARNING),
                    )

    @property
    def logger(self):
        '''
        Getter
        '''
        return self._logger

    @property
    def log_level(self):
        '''
        Getter
        '''
        return self._log_level

    @classmethod
    def _logger_create(cls, log_level, logger, log_to=None, log_file=None, log_fmt=None):
        '''
        Configure logging and return (log_level, logger).
        A logger passed in is used as-is.
        '''
        log_level = azcmdlets.util.log_level_normalize(log_level if log_level is not None else cls.LOG_LEVEL_DEFAULT)
        if logger is not None:
            return log_level, logger
        log_fmt = log_fmt or cls.LOG_FORMAT
        if log_file:
            dirname = os.path.dirname(log_file) or '.'
            if not os.path.isdir(dirname):
                raise ValueError("cannot log to %r: directory %r does not exist" % (log_file, dirname))
            if not os.access(dirname, os.W_OK):
                raise PermissionError("cannot log to %r: directory %r is not writeable" % (log_file, dirname))
            logging.basicConfig(format=log_fmt, filename=log_file)
        else:
            stream = sys.stderr if LogTo(log_to or cls.LOG_TO_DEFAULT) == LogTo.STDERR else sys.stdout
            logging.basicConfig(format=log_fmt, stream=stream)
        logger = logging.getLogger(name=cls.LOGGER_NAME)
        logger.setLevel(log_level)
        for name, level in cls.QUIET_LOGGERS:
            logging.getLogger(name=name).setLevel(level)
        return log_level, logger

    @classmethod
    def _cls_init(cls):
        '''
        Start-of-day initialization
        '''
        azcmdlets.output.capture()

    @classmethod
    def mth(cls):
        '''
        Return "Class.method" for the caller; used to prefix log messages
        '''
        return "%s.%s" % (cls.__name__, getframename(1))

    ######################################################################
    # command-line handling

    @staticmethod
    def debug_default():
        '''
        Default for --debug, taken from AZCMDLETS_DEBUG
        '''
        env = os.environ.get('AZCMDLETS_DEBUG', '')
        if not env:
            return 0
        try:
            return int(env)
        except ValueError as exc:
            print("invalid value %r for AZCMDLETS_DEBUG" % env)
            raise ApplicationExit(1) from exc

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        Add command-line arguments. Subclasses chain to this with super().
        '''
        group = ap_parser.get_argument_group('logging')
        group.add_argument('--debug', type=int, default=cls.debug_default(),
                           action=ArgExplicit,
                           help='debug level')
        group.add_argument('--exit_verbose', action='store_true',
                           help='log the exit status')
        group.add_argument('--log_level', type=str, default=cls.LOG_LEVEL_DEFAULT, choices=cls.LOG_LEVEL_CHOICES,
                           action=ArgExplicit,
                           help='log level')
        group.add_argument('--log_to', type=str, default=cls.LOG_TO_DEFAULT, choices=LogTo.values(),
                           action=ArgExplicit,
                           help='log destination')
        group.add_argument('--log_file', type=str, default=None,
                           action=ArgExplicit,
                           help='log to this file (overrides --log_to)')
        group.add_argument('--subscription_config_path', type=str, default=None,
                           help=argparse.SUPPRESS)

    # Parsed arguments named here (in any class in the MRO) are held
    # back from the constructor and kept in _args_saved instead.
    ARGS_SAVE = ()

    @classmethod
    def args_process(cls, args_dict):
        '''
        Split parsed arguments into (constructor kwargs, saved args).
        '''
        to_save = set()
        for kls in inspect.getmro(cls):
            to_save.update(getattr(kls, 'ARGS_SAVE', ()))
        args_saved = {k : args_dict.pop(k) for k in to_save if k in args_dict}
        return (args_dict, args_saved)

    _args_save_lock = threading.Lock()

    def args_save(self, args_saved):
        '''
        Keep the arguments held back by args_process()
        '''
        assert isinstance(args_saved, dict)
        with self._args_save_lock:
            assert self._args_saved is None
            self._args_saved = args_saved

    @classmethod
    def main_app_setup(cls, cmd_args):
        '''
        Parse cmd_args and construct the application.
        Split out from main_with_args() so tests can drive it.
        Returns (app, exit_verbose)
        '''
        ap_parser = ArgumentParser(allow_abbrev=False)
        cls.main_add_parser_args(ap_parser)
        ap_args = ap_parser.parse_args(args=cmd_args)
        args_dict = vars(ap_args)
        args_dict.setdefault('args_explicit', set())
        config_path = args_dict.pop('subscription_config_path', None)
        if config_path:
            azcmdlets.paths.subscription_config_filename_setdefault(config_path)
        exit_verbose = args_dict.pop('exit_verbose', False)
        args_dict, args_saved = cls.args_process(args_dict)
        # Validation failures on the command line end the command
        args_dict['exc_value'] = ApplicationExit
        app = cls(**args_dict)
        app.args_save(args_saved)
        return (app, exit_verbose)

    @classmethod
    def main(cls, name):
        '''
        Call at the bottom of each runnable module with __name__
        '''
        if name == '__main__':
            cls.main_with_args(sys.argv[1:])
            raise SystemExit(1)

    @classmethod
    def main_with_args(cls, cmd_args):
        '''
        Run as from the command line. Always raises SystemExit.
        '''
        cls._cls_init()
        app = None
        exit_verbose = '--exit_verbose' in cmd_args
        try:
            app, exit_verbose = cls.main_app_setup(cmd_args)
            app.main_execute()
            app.logger.error("%s.main_execute returned unexpectedly", type(app).__name__)
            raise ApplicationExit(1)
        except (ApplicationExit, SystemExit) as exc:
            cls._exit_report(app, exc.code, exit_verbose)
            if isinstance(exc, SystemExit):
                raise
            raise SystemExit(int(bool(exc.code))) from exc
        except BaseException as exc: # pylint: disable=broad-except
            expanded = expand_item_pformat(exc)
            if len(expanded.splitlines()) > 500:
                expanded = pprint.pformat(vars(exc))
            level = logging.ERROR if isinstance(exc, Exception) else logging.WARNING
            txt = "%r\n%s\n%s" % (exc, expanded, traceback.format_exc())
            if app is not None:
                app.logger.log(level, "%s", txt)
            else:
                print(txt, flush=True)
        cls._exit_report(app, 1, exit_verbose)
        raise SystemExit(1)

    @classmethod
    def _exit_report(cls, app, code, exit_verbose):
        '''
        Report the exit code when asked to. A non-integer code
        is a message, and is always reported.
        '''
        if exit_verbose:
            txt = "exit code %r" % code
        elif not isinstance(code, (bool, int, type(None))):
            txt = str(code)
        else:
            return
        if app is not None:
            app.logger.info("%s", txt)
        else:
            print(txt, file=sys.stderr if LogTo(cls.LOG_TO_DEFAULT) == LogTo.STDERR else sys.stdout, flush=True)

    def main_execute(self):
        '''
        Do the work. Subclasses overload this.
        '''
        raise ApplicationExit(0)

class ApplicationWithSubscription(Application):
    '''
    Application bound to one subscription
    '''
    def __init__(self, subscription_id=None, tenant_id=None, **kwargs):
        if (not subscription_id) or (subscription_id == 'default'):
            # 'default' is resolved here rather than at parse time so that
            # --help does not need to load the subscription config.
            subscription_id = azcmdlets.subscription_default()
        self.subscription_id = subscription_id
        self.tenant_id = tenant_id or self.subscription_info.tenant_id or azcmdlets.scfg.tenant_id_default
        super().__init__(**kwargs)

    @property
    def subscription_id(self):
        '''
        Getter
        '''
        return self._subscription_id or None

    @subscription_id.setter
    def subscription_id(self, value):
        '''
        Setter. Accepts a UUID or an alias from the subscription config.
        '''
        subscription_id = azcmdlets.util.uuid_normalize(value, key='subscription_id', exc_value=None)
        if not subscription_id:
            subscription_id = azcmdlets.subscription_mapper.effective(value)
        self._subscription_id = subscription_id
        self.subscription_info = azcmdlets.subscription_info_get(subscription_id)

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        See azcmdlets.common.Application.main_add_parser_args()
        '''
        super().main_add_parser_args(ap_parser)
        group = ap_parser.get_argument_group('subscription')
        group.add_argument('--subscription_id', type=str, default='default',
                           action=ArgExplicit,
                           help='subscription ID or alias (default %(default)r)')
        group.add_argument('--tenant_id', type=str, default='',
                           action=ArgExplicit,
                           help='tenant ID (default: from the subscription config)')

class ApplicationWithResourceGroup(ApplicationWithSubscription):
    '''
    Application with a default resource group
    '''
    def __init__(self, resource_group='', **kwargs):
        super().__init__(**kwargs)
        self.resource_group = resource_group or ''

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        See azcmdlets.common.Application.main_add_parser_args()
        '''
        super().main_add_parser_args(ap_parser)
        group = ap_parser.get_argument_group('resource group')
        group.add_argument('--resource_group', type=str, default=os.environ.get('AZCMDLETS_RESOURCE_GROUP', ''),
                           action=ArgExplicit,
                           help='resource group (default from AZCMDLETS_RESOURCE_GROUP)')

    def resource_group_effective(self, resource_group, required=True, exc_value=None):
        '''
        Return resource_group, falling back to self.resource_group.
        Raises exc_value when required and neither is set, or
        when the name is not a valid resource group name.
        '''
        exc_value = exc_value or self.exc_value
        resource_group = resource_group or self.resource_group
        if not resource_group:
            if required:
                raise exc_value("'resource_group' not specified")
            return ''
        if not isinstance(resource_group, str):
            raise TypeError("invalid resource_group type %s" % type(resource_group))
        if not RE_RESOURCE_GROUP_ABS.search(resource_group):
            raise exc_value("invalid resource_group name %r" % resource_group)
        return resource_group
