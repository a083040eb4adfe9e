#
# azcmdlets/exceptions.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Exception classes shared across azcmdlets modules
'''
class ApplicationException(Exception):
    '''
    Base class for application exceptions
    '''

class ApplicationExit(ApplicationException):
    '''
    This is interpreted as SystemExit, but it inherits from ApplicationException
    and not SystemExit. That makes it part of the Exception hierarchy
    and not BaseException. Library code raises this (or whatever
    exc_value the caller supplied) to end a command with an exit code.
    '''
    def __init__(self, code):
        self.code = code
        super().__init__(str(self.code))

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.code)

    def __str__(self):
        return str(self.code)

class ParameterSetError(ValueError):
    '''
    The combination of parameters given does not match
    any parameter set of the operation.
    '''
    def __init__(self, txt, given=None, candidates=None):
        super().__init__(txt)
        self.txt = txt
        self.given = sorted(given or list())
        self.candidates = list(candidates or list())

    def __repr__(self):
        return "%s(%r, given=%r, candidates=%r)" % (type(self).__name__, self.txt, self.given, self.candidates)

    def __str__(self):
        return self.txt

class AmbiguousParameterSetError(ParameterSetError):
    '''
    The parameters given match more than one parameter set
    and there is no default to break the tie.
    '''
    # no specialization here

class InvalidOperationError(ApplicationException):
    '''
    The requested operation is refused locally because
    it does not apply to the target object.
    '''
    # no specialization here

class SubscriptionConfigNotFoundError(ApplicationExit):
    '''
    Special case of ApplicationExit used to indicate that
    the exit reason is that the subscription config file
    is not found.
    '''
    # no specialization here
