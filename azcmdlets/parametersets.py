#
# azcmdlets/parametersets.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Parameter sets: named, mutually exclusive groups of parameters.
Each parameter set is one way of invoking an operation
(for example: by name, by resource ID, or everything).
Selection happens once per invocation after argparse is done.
'''
from azcmdlets.exceptions import (AmbiguousParameterSetError,
                                  ParameterSetError,
                                 )
from azcmdlets.util import value_given

class ParameterSet():
    '''
    One parameter set. required and optional are iterables of parameter names.
    '''
    def __init__(self, name, required=(), optional=()):
        self.name = name
        self.required = tuple(required)
        self.optional = tuple(optional)
        overlap = set(self.required) & set(self.optional)
        if overlap:
            raise ValueError("parameter set %r has %s both required and optional" % (name, sorted(overlap)))

    def __repr__(self):
        return "%s(%r, required=%r, optional=%r)" % (type(self).__name__, self.name, self.required, self.optional)

    @property
    def allowed(self):
        '''
        Getter: all parameter names accepted by this set
        '''
        return set(self.required) | set(self.optional)

    def matches(self, given_names):
        '''
        Return whether this set accepts exactly the given parameter names.
        '''
        given_names = set(given_names)
        if not set(self.required).issubset(given_names):
            return False
        return given_names.issubset(self.allowed)

    def specificity(self, given_names):
        '''
        Number of given parameters that this set requires
        '''
        return len(set(self.required) & set(given_names))

def given_names_get(given):
    '''
    given is a dict of parameter name to value.
    Return the set of names whose values count as given.
    '''
    return {k for k, v in given.items() if value_given(v)}

def parameter_set_select(sets, given, default=None):
    '''
    Choose one of sets (iterable of ParameterSet) for the parameters in
    given (dict of name -> value). Returns the chosen ParameterSet.
    default is the name of the set to prefer when several match.
    Raises ParameterSetError when nothing matches and
    AmbiguousParameterSetError when the choice cannot be made.
    '''
    sets = list(sets)
    names = [ps.name for ps in sets]
    if len(set(names)) != len(names):
        raise ValueError("duplicate parameter set names in %r" % names)
    given_names = given_names_get(given)
    matched = [ps for ps in sets if ps.matches(given_names)]
    if len(matched) == 1:
        return matched[0]
    if not matched:
        raise ParameterSetError("parameters %s do not match any parameter set (available: %s)" % (sorted(given_names), ', '.join(names)),
                                given=given_names,
                                candidates=names)
    if default:
        for ps in matched:
            if ps.name == default:
                return ps
    best = max(ps.specificity(given_names) for ps in matched)
    top = [ps for ps in matched if ps.specificity(given_names) == best]
    if len(top) == 1:
        return top[0]
    top_names = [ps.name for ps in top]
    raise AmbiguousParameterSetError("parameters %s are ambiguous between parameter sets %s" % (sorted(given_names), ', '.join(top_names)),
                                     given=given_names,
                                     candidates=top_names)
