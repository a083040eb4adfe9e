#!/usr/bin/env python3
#
# azcmdlets/policy.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Policy cmdlets: policy assignments, policy definitions,
and policy set definitions.
'''
import re

from azure.mgmt.resource import PolicyClient
from azure.mgmt.resource.policy.models import (Identity,
                                               ParameterDefinitionsValue,
                                               ParameterValuesValue,
                                               PolicyAssignment,
                                               PolicyDefinition,
                                               PolicyDefinitionReference,
                                               PolicySetDefinition,
                                              )

import azcmdlets.base_defaults
from azcmdlets.azresourceid import (AzManagementGroupId,
                                    AzRGResourceId,
                                    AzResourceId,
                                    AzSubResourceId,
                                    AzSubscriptionResourceId,
                                    azresourceid_from_text,
                                   )
from azcmdlets.btypes import PolicyMode
from azcmdlets.cmdlet import (PresentationModel,
                              ServiceFacade,
                              ServiceManager,
                             )
from azcmdlets.command import Command
from azcmdlets.parametersets import ParameterSet
from azcmdlets.util import (json_or_file_load,
                            odata_eq,
                            stringlist_normalize,
                           )

POLICY_DEFINITION_MUTEX_TXT = 'Only one of PolicyDefinition or PolicySetDefinition can be specified, not both.'

FILTER_AT_SCOPE = 'atScope()'

# /subscriptions/<sid>/providers/Microsoft.Authorization/policyDefinitions/<name>
# /providers/Microsoft.Management/managementGroups/<mg>/providers/Microsoft.Authorization/policySetDefinitions/<name>
# /providers/Microsoft.Authorization/policyDefinitions/<name> (built-in)
RE_POLICY_DEFINITION_ID_ABS = re.compile(r'^(?:/subscriptions/(?P<subscription_id>[^/]+)|/providers/Microsoft\.Management/managementGroups/(?P<management_group_name>[^/]+))?'
                                         r'/providers/Microsoft\.Authorization/(?P<kind>policyDefinitions|policySetDefinitions)/(?P<name>[^/]+)$',
                                         re.IGNORECASE)

def policy_definition_filter(policy_definition_id):
    '''
    OData filter that selects assignments of the given definition
    '''
    return odata_eq('policyDefinitionId', policy_definition_id)

def policy_definition_id_parse(definition_id, kind='policyDefinitions', exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Parse a policy (set) definition ID.
    Returns a dict with keys subscription_id, management_group_name, name.
    Neither scope key is set for a built-in definition.
    '''
    m = RE_POLICY_DEFINITION_ID_ABS.search(definition_id or '')
    if (not m) or (m.group('kind').lower() != kind.lower()):
        raise exc_value("invalid %s ID %r" % (kind, definition_id))
    return {'subscription_id' : m.group('subscription_id') or '',
            'management_group_name' : m.group('management_group_name') or '',
            'name' : m.group('name'),
           }

def assignment_parameters_build(parameters):
    '''
    parameters is a dict. Values already in the form {"value": v}
    are kept; plain values are wrapped that way.
    Returns a dict of name to ParameterValuesValue.
    '''
    ret = dict()
    for name, val in (parameters or dict()).items():
        if isinstance(val, ParameterValuesValue):
            ret[name] = val
        elif isinstance(val, dict) and (set(val.keys()) == {'value'}):
            ret[name] = ParameterValuesValue(value=val['value'])
        else:
            ret[name] = ParameterValuesValue(value=val)
    return ret

def definition_parameters_build(parameters):
    '''
    parameters is a dict of parameter declarations as found
    in a policy definition. Returns a dict of name to ParameterDefinitionsValue.
    '''
    if parameters is None:
        return None
    return {k : v if isinstance(v, ParameterDefinitionsValue) else ParameterDefinitionsValue.from_dict(v) for k, v in parameters.items()}

######################################################################
# presentation models

class PolicyAssignmentModel(PresentationModel):
    '''
    azure.mgmt.resource.policy.models.PolicyAssignment
    '''
    FIELDS = ('name',
              'id',
              'scope',
              'not_scopes',
              'policy_definition_id',
              'display_name',
              'description',
              'parameters',
              'metadata',
              'enforcement_mode',
              'location',
              ('identity_type', 'identity.type'),
              ('principal_id', 'identity.principal_id'),
             )
    TABLE_COLUMNS = ('name', 'scope', 'policy_definition_id')

class PolicyDefinitionModel(PresentationModel):
    '''
    azure.mgmt.resource.policy.models.PolicyDefinition
    '''
    FIELDS = ('name',
              'id',
              'policy_type',
              'mode',
              'display_name',
              'description',
              'policy_rule',
              'parameters',
              'metadata',
             )
    TABLE_COLUMNS = ('name', 'policy_type', 'display_name')

class PolicySetDefinitionModel(PresentationModel):
    '''
    azure.mgmt.resource.policy.models.PolicySetDefinition
    '''
    FIELDS = ('name',
              'id',
              'policy_type',
              'display_name',
              'description',
              'parameters',
              'metadata',
              'policy_definitions',
             )
    TABLE_COLUMNS = ('name', 'policy_type', 'display_name')

######################################################################
# facade

class PolicyFacade(ServiceFacade):
    '''
    self.client is azure.mgmt.resource.PolicyClient
    '''

    ######################################################################
    # assignments

    def assignment_get(self, scope, name):
        '''
        Return PolicyAssignmentModel or None
        '''
        return PolicyAssignmentModel.from_sdk(self._cw_get(self.client.policy_assignments.get, str(scope), name))

    def assignment_get_by_id(self, assignment_id):
        '''
        Return PolicyAssignmentModel or None
        '''
        return PolicyAssignmentModel.from_sdk(self._cw_get(self.client.policy_assignments.get_by_id, assignment_id))

    def _assignment_page(self, azrid, filter=None, next_link=None): # pylint: disable=redefined-builtin
        '''
        One page of assignments at or below the scope azrid.
        The list operation used depends on the scope type.
        '''
        ops = self.client.policy_assignments
        kwargs = {'next_link' : next_link,
                  'transform' : PolicyAssignmentModel.from_sdk,
                  'filter' : filter,
                 }
        if isinstance(azrid, AzManagementGroupId):
            return self._cw_page(ops.list_for_management_group, azrid.management_group_name, **kwargs)
        if isinstance(azrid, AzSubResourceId):
            parent = "%s/%s" % (azrid.resource_type, azrid.resource_name)
            return self._cw_page(ops.list_for_resource, azrid.resource_group_name, azrid.provider_name, parent, azrid.subresource_type, azrid.subresource_name, **kwargs)
        if isinstance(azrid, AzResourceId):
            return self._cw_page(ops.list_for_resource, azrid.resource_group_name, azrid.provider_name, '', azrid.resource_type, azrid.resource_name, **kwargs)
        if isinstance(azrid, AzRGResourceId):
            return self._cw_page(ops.list_for_resource_group, azrid.resource_group_name, **kwargs)
        if isinstance(azrid, AzSubscriptionResourceId):
            return self._cw_page(ops.list, **kwargs)
        raise self.exc_value("unsupported policy assignment scope %r" % str(azrid))

    def assignment_list(self, azrid, filter=None, next_link=None, walk=True): # pylint: disable=redefined-builtin
        '''
        List assignments for the scope azrid (AzAnyResourceId)
        '''
        return self._pages(self._assignment_page, azrid, filter=filter, next_link=next_link, walk=walk)

    def assignment_create(self, scope, name, assignment):
        '''
        Create or replace an assignment
        '''
        return PolicyAssignmentModel.from_sdk(self._cw_call(self.client.policy_assignments.create, str(scope), name, assignment))

    def assignment_create_by_id(self, assignment_id, assignment):
        '''
        Create or replace an assignment by ID
        '''
        return PolicyAssignmentModel.from_sdk(self._cw_call(self.client.policy_assignments.create_by_id, assignment_id, assignment))

    def assignment_delete(self, scope, name):
        '''
        Delete an assignment
        '''
        return PolicyAssignmentModel.from_sdk(self._cw_call(self.client.policy_assignments.delete, str(scope), name))

    def assignment_delete_by_id(self, assignment_id):
        '''
        Delete an assignment by ID
        '''
        return PolicyAssignmentModel.from_sdk(self._cw_call(self.client.policy_assignments.delete_by_id, assignment_id))

    ######################################################################
    # definitions and set definitions
    #
    # The two families have the same shape. ops_name is
    # policy_definitions or policy_set_definitions.

    _KINDS = {'policy_definitions' : PolicyDefinitionModel,
              'policy_set_definitions' : PolicySetDefinitionModel,
             }

    def _ops(self, ops_name):
        '''
        Return (operations, model class) for ops_name
        '''
        return (getattr(self.client, ops_name), self._KINDS[ops_name])

    def definition_get(self, ops_name, name, management_group_name=''):
        '''
        Return a definition model or None
        '''
        ops, kls = self._ops(ops_name)
        if management_group_name:
            return kls.from_sdk(self._cw_get(ops.get_at_management_group, name, management_group_name))
        return kls.from_sdk(self._cw_get(ops.get, name))

    def definition_get_built_in(self, ops_name, name):
        '''
        Return a built-in definition model or None
        '''
        ops, kls = self._ops(ops_name)
        return kls.from_sdk(self._cw_get(ops.get_built_in, name))

    def _definition_page(self, ops_name, management_group_name='', built_in=False, next_link=None):
        '''
        One page of definitions
        '''
        ops, kls = self._ops(ops_name)
        if built_in:
            return self._cw_page(ops.list_built_in, next_link=next_link, transform=kls.from_sdk)
        if management_group_name:
            return self._cw_page(ops.list_by_management_group, management_group_name, next_link=next_link, transform=kls.from_sdk)
        return self._cw_page(ops.list, next_link=next_link, transform=kls.from_sdk)

    def definition_list(self, ops_name, management_group_name='', built_in=False, next_link=None, walk=True):
        '''
        List definitions in the subscription, the management group, or the built-ins
        '''
        return self._pages(self._definition_page, ops_name, management_group_name=management_group_name, built_in=built_in, next_link=next_link, walk=walk)

    def definition_create_or_update(self, ops_name, name, definition, management_group_name=''):
        '''
        Create or replace a definition
        '''
        ops, kls = self._ops(ops_name)
        if management_group_name:
            return kls.from_sdk(self._cw_call(ops.create_or_update_at_management_group, name, management_group_name, definition))
        return kls.from_sdk(self._cw_call(ops.create_or_update, name, definition))

    def definition_delete(self, ops_name, name, management_group_name=''):
        '''
        Delete a definition
        '''
        ops, _ = self._ops(ops_name)
        if management_group_name:
            self._cw_call(ops.delete_at_management_group, name, management_group_name)
        else:
            self._cw_call(ops.delete, name)

######################################################################
# cmdlets

command = Command()

class Manager(ServiceManager):
    '''
    Policy cmdlets
    '''
    ACTION_ARGS = (('name', {'help' : 'policy assignment or definition name'}),
                   ('id', {'help' : 'fully-qualified ID'}),
                   ('scope', {'help' : 'assignment scope (resource ID)'}),
                   ('not_scope', {'help' : 'comma-separated scopes excluded from the assignment'}),
                   ('policy_definition', {'help' : 'policy definition ID'}),
                   ('policy_set_definition', {'help' : 'policy set definition ID'}),
                   ('policy_definition_id', {'help' : 'list assignments of this definition ID'}),
                   ('policy_parameter', {'help' : 'assignment parameters as JSON or a path to a JSON file'}),
                   ('policy_parameter_object', {'help' : 'assignment parameters as a JSON object of plain values'}),
                   ('display_name', {'help' : 'display name'}),
                   ('description', {'help' : 'description'}),
                   ('metadata', {'help' : 'metadata as JSON or a path to a JSON file'}),
                   ('location', {'help' : 'assignment location (required with assign_identity)'}),
                   ('assign_identity', {'action' : 'store_true', 'help' : 'give the assignment a system-assigned identity'}),
                   ('policy', {'help' : 'policy rule as JSON or a path to a JSON file'}),
                   ('parameter', {'help' : 'parameter declarations as JSON or a path to a JSON file'}),
                   ('mode', {'help' : 'policy mode (%s)' % ', '.join(PolicyMode.values(sort=False))}),
                   ('policy_definitions', {'help' : 'policy set members as JSON or a path to a JSON file'}),
                   ('management_group_name', {'help' : 'management group name'}),
                   ('builtin', {'action' : 'store_true', 'help' : 'built-in definitions only'}),
                  )

    def policy_facade(self, subscription_id=None):
        '''
        Return PolicyFacade for the given subscription (default self.subscription_id)
        '''
        client = self._az_client_gen_property('policy', PolicyClient, subscription_id=subscription_id)
        return PolicyFacade(client, self.logger, exc_value=self.exc_value)

    def _scope_parse(self, scope):
        '''
        Return scope as AzAnyResourceId
        '''
        return azresourceid_from_text(scope, exc_desc='scope', exc_value=self.exc_value)

    def _facade_for_scope(self, azrid):
        '''
        Return the facade for the subscription of azrid.
        Management group scopes use the default subscription.
        '''
        return self.policy_facade(subscription_id=azrid.subscription_id)

    def _json_param(self, value, key, types=(dict,)):
        '''
        Load a JSON-or-file parameter and check its type
        '''
        ret = json_or_file_load(value, key=key, exc_value=self.exc_value)
        if (ret is not None) and (not isinstance(ret, types)):
            raise self.exc_value("%s has unexpected type %s" % (key, type(ret).__name__))
        return ret

    ######################################################################
    # assignments

    ASSIGNMENT_GET_SETS = (ParameterSet('ByName', required=('scope',), optional=('name', 'policy_definition_id')),
                           ParameterSet('ById', required=('id',)),
                           ParameterSet('All', optional=('policy_definition_id',)),
                          )

    @command.printable
    def assignment_get(self, name=None, scope=None, id=None, policy_definition_id=None): # pylint: disable=redefined-builtin
        '''
        Get one policy assignment, or list assignments
        '''
        ps = self.parameter_set_select(self.ASSIGNMENT_GET_SETS,
                                       {'name' : name,
                                        'scope' : scope,
                                        'id' : id,
                                        'policy_definition_id' : policy_definition_id,
                                       },
                                       default='All')
        if ps.name == 'ById':
            return self.policy_facade().assignment_get_by_id(id)
        if ps.name == 'ByName':
            azrid = self._scope_parse(scope)
            facade = self._facade_for_scope(azrid)
            if name:
                return facade.assignment_get(azrid, name)
            if policy_definition_id:
                return facade.assignment_list(azrid, filter=policy_definition_filter(policy_definition_id))
            return facade.assignment_list(azrid, filter=FILTER_AT_SCOPE)
        azrid = AzSubscriptionResourceId(self.subscription_id, exc_value=self.exc_value)
        filt = policy_definition_filter(policy_definition_id) if policy_definition_id else None
        return self.policy_facade().assignment_list(azrid, filter=filt)

    def _assignment_parameters(self, policy_parameter, policy_parameter_object):
        '''
        Return assignment parameters (dict of ParameterValuesValue) or None
        '''
        if policy_parameter and policy_parameter_object:
            raise self.exc_value("only one of policy_parameter or policy_parameter_object may be specified")
        if policy_parameter:
            data = self._json_param(policy_parameter, 'policy_parameter')
            # A full parameters file nests the values under 'parameters'
            if isinstance(data.get('parameters', None), dict) and (len(data) == 1) and ('value' not in data['parameters']):
                data = data['parameters']
            return assignment_parameters_build(data)
        if policy_parameter_object:
            data = self._json_param(policy_parameter_object, 'policy_parameter_object')
            return {k : ParameterValuesValue(value=v) for k, v in data.items()}
        return None

    def _definition_id_from(self, value, desc):
        '''
        value is a definition ID or an object with an id (a definition model).
        '''
        if isinstance(value, str):
            return value
        ret = getattr(value, 'id', None)
        if not ret:
            raise self.exc_value("The supplied %s object is invalid." % desc)
        return ret

    @command.printable
    def assignment_new(self, name=None, scope=None, not_scope=None, policy_definition=None, policy_set_definition=None,
                       policy_parameter=None, policy_parameter_object=None, display_name=None, description=None,
                       metadata=None, location=None, assign_identity=None):
        '''
        Create a policy assignment
        '''
        if not scope:
            raise self.exc_value("'scope' not specified")
        if not name:
            raise self.exc_value("'name' not specified")
        if policy_definition and policy_set_definition:
            raise self.exc_value(POLICY_DEFINITION_MUTEX_TXT)
        if policy_definition:
            definition_id = self._definition_id_from(policy_definition, 'PolicyDefinition')
        elif policy_set_definition:
            definition_id = self._definition_id_from(policy_set_definition, 'PolicySetDefinition')
        else:
            raise self.exc_value("one of policy_definition or policy_set_definition must be specified")
        azrid = self._scope_parse(scope)
        assignment = PolicyAssignment(display_name=display_name or None,
                                      description=description or None,
                                      policy_definition_id=definition_id,
                                      not_scopes=stringlist_normalize(not_scope) or None,
                                      parameters=self._assignment_parameters(policy_parameter, policy_parameter_object),
                                      metadata=self._json_param(metadata, 'metadata'))
        if assign_identity:
            if not location:
                raise self.exc_value("'location' is required to assign an identity")
            assignment.identity = Identity(type='SystemAssigned')
        if location:
            assignment.location = location
        self.logger.debug("%s scope=%r name=%r definition_id=%r", self.mth(), str(azrid), name, definition_id)
        return self._facade_for_scope(azrid).assignment_create(azrid, name, assignment)

    ASSIGNMENT_SET_SETS = (ParameterSet('ByName', required=('name', 'scope'), optional=('display_name', 'description', 'not_scope')),
                           ParameterSet('ById', required=('id',), optional=('display_name', 'description', 'not_scope')),
                          )

    @command.printable
    def assignment_set(self, name=None, scope=None, id=None, display_name=None, description=None, not_scope=None): # pylint: disable=redefined-builtin
        '''
        Update a policy assignment. Values not given are kept from the existing assignment.
        '''
        ps = self.parameter_set_select(self.ASSIGNMENT_SET_SETS,
                                       {'name' : name,
                                        'scope' : scope,
                                        'id' : id,
                                        'display_name' : display_name,
                                        'description' : description,
                                        'not_scope' : not_scope,
                                       },
                                       default='ByName')
        if ps.name == 'ById':
            facade = self.policy_facade()
            existing = facade.assignment_get_by_id(id)
        else:
            azrid = self._scope_parse(scope)
            facade = self._facade_for_scope(azrid)
            existing = facade.assignment_get(azrid, name)
        if not existing:
            raise self.exc_value("policy assignment %r not found" % (id or name))
        assignment = existing.sdk
        # read-only; the request path carries the scope
        assignment.scope = None
        if display_name:
            assignment.display_name = display_name
        if description:
            assignment.description = description
        if not_scope:
            assignment.not_scopes = stringlist_normalize(not_scope)
        if ps.name == 'ById':
            return facade.assignment_create_by_id(id, assignment)
        return facade.assignment_create(azrid, name, assignment)

    ASSIGNMENT_REMOVE_SETS = (ParameterSet('ByName', required=('name', 'scope')),
                              ParameterSet('ById', required=('id',)),
                             )

    @command.printable
    def assignment_remove(self, name=None, scope=None, id=None): # pylint: disable=redefined-builtin
        '''
        Delete a policy assignment
        '''
        ps = self.parameter_set_select(self.ASSIGNMENT_REMOVE_SETS,
                                       {'name' : name,
                                        'scope' : scope,
                                        'id' : id,
                                       },
                                       default='ByName')
        if ps.name == 'ById':
            return self.policy_facade().assignment_delete_by_id(id)
        azrid = self._scope_parse(scope)
        return self._facade_for_scope(azrid).assignment_delete(azrid, name)

    ######################################################################
    # definitions and set definitions

    def _definition_target(self, ops_name, name, id, management_group_name): # pylint: disable=redefined-builtin
        '''
        Resolve (facade, name, management_group_name) from either name+scope or an ID
        '''
        if id:
            kind = 'policyDefinitions' if ops_name == 'policy_definitions' else 'policySetDefinitions'
            parsed = policy_definition_id_parse(id, kind=kind, exc_value=self.exc_value)
            if not (parsed['subscription_id'] or parsed['management_group_name']):
                raise self.exc_value("built-in definition %r may not be modified" % id)
            return (self.policy_facade(subscription_id=parsed['subscription_id'] or None), parsed['name'], parsed['management_group_name'])
        if not name:
            raise self.exc_value("'name' not specified")
        return (self.policy_facade(), name, management_group_name or '')

    DEFINITION_GET_SETS = (ParameterSet('ByName', required=('name',), optional=('management_group_name',)),
                           ParameterSet('ById', required=('id',)),
                           ParameterSet('Builtin', required=('builtin',)),
                           ParameterSet('All', optional=('management_group_name',)),
                          )

    def _definition_get(self, ops_name, name, id, management_group_name, builtin): # pylint: disable=redefined-builtin
        '''
        Shared by definition_get and set_definition_get
        '''
        ps = self.parameter_set_select(self.DEFINITION_GET_SETS,
                                       {'name' : name,
                                        'id' : id,
                                        'management_group_name' : management_group_name,
                                        'builtin' : builtin or None,
                                       },
                                       default='All')
        if ps.name == 'Builtin':
            return self.policy_facade().definition_list(ops_name, built_in=True)
        if ps.name == 'All':
            return self.policy_facade().definition_list(ops_name, management_group_name=management_group_name or '')
        if ps.name == 'ById':
            kind = 'policyDefinitions' if ops_name == 'policy_definitions' else 'policySetDefinitions'
            parsed = policy_definition_id_parse(id, kind=kind, exc_value=self.exc_value)
            if not (parsed['subscription_id'] or parsed['management_group_name']):
                return self.policy_facade().definition_get_built_in(ops_name, parsed['name'])
            facade = self.policy_facade(subscription_id=parsed['subscription_id'] or None)
            return facade.definition_get(ops_name, parsed['name'], management_group_name=parsed['management_group_name'])
        facade = self.policy_facade()
        ret = facade.definition_get(ops_name, name, management_group_name=management_group_name or '')
        if (ret is None) and (not management_group_name):
            ret = facade.definition_get_built_in(ops_name, name)
        return ret

    def _definition_remove(self, ops_name, name, id, management_group_name): # pylint: disable=redefined-builtin
        '''
        Shared by definition_remove and set_definition_remove
        '''
        facade, name, management_group_name = self._definition_target(ops_name, name, id, management_group_name)
        facade.definition_delete(ops_name, name, management_group_name=management_group_name)
        return None

    @command.printable
    def definition_get(self, name=None, id=None, management_group_name=None, builtin=None): # pylint: disable=redefined-builtin
        '''
        Get one policy definition, or list definitions
        '''
        return self._definition_get('policy_definitions', name, id, management_group_name, builtin)

    @command.printable
    def definition_new(self, name=None, policy=None, display_name=None, description=None, metadata=None, parameter=None, mode=None, management_group_name=None):
        '''
        Create a policy definition
        '''
        if not name:
            raise self.exc_value("'name' not specified")
        rule = self._json_param(policy, 'policy')
        if rule is None:
            raise self.exc_value("'policy' not specified")
        mode = PolicyMode.coerce(mode or azcmdlets.base_defaults.POLICY_MODE_DEFAULT, exc_value=self.exc_value, prefix='mode').value
        definition = PolicyDefinition(mode=mode,
                                      display_name=display_name or None,
                                      description=description or None,
                                      policy_rule=rule,
                                      metadata=self._json_param(metadata, 'metadata'),
                                      parameters=definition_parameters_build(self._json_param(parameter, 'parameter')))
        return self.policy_facade().definition_create_or_update('policy_definitions', name, definition, management_group_name=management_group_name or '')

    @command.printable
    def definition_set(self, name=None, id=None, policy=None, display_name=None, description=None, metadata=None, parameter=None, mode=None, management_group_name=None): # pylint: disable=redefined-builtin
        '''
        Update a policy definition. Values not given are kept from the existing definition.
        '''
        facade, name, management_group_name = self._definition_target('policy_definitions', name, id, management_group_name)
        existing = facade.definition_get('policy_definitions', name, management_group_name=management_group_name)
        if not existing:
            raise self.exc_value("policy definition %r not found" % (id or name))
        definition = existing.sdk
        if display_name:
            definition.display_name = display_name
        if description:
            definition.description = description
        rule = self._json_param(policy, 'policy')
        if rule is not None:
            definition.policy_rule = rule
        meta = self._json_param(metadata, 'metadata')
        if meta is not None:
            definition.metadata = meta
        params = self._json_param(parameter, 'parameter')
        if params is not None:
            definition.parameters = definition_parameters_build(params)
        if mode:
            definition.mode = PolicyMode.coerce(mode, exc_value=self.exc_value, prefix='mode').value
        return facade.definition_create_or_update('policy_definitions', name, definition, management_group_name=management_group_name)

    @command.simple
    def definition_remove(self, name=None, id=None, management_group_name=None): # pylint: disable=redefined-builtin
        '''
        Delete a policy definition
        '''
        return self._definition_remove('policy_definitions', name, id, management_group_name)

    def _policy_definition_references(self, policy_definitions):
        '''
        Return a list of PolicyDefinitionReference or None
        '''
        data = self._json_param(policy_definitions, 'policy_definitions', types=(list,))
        if data is None:
            return None
        return [x if isinstance(x, PolicyDefinitionReference) else PolicyDefinitionReference.from_dict(x) for x in data]

    @command.printable
    def set_definition_get(self, name=None, id=None, management_group_name=None, builtin=None): # pylint: disable=redefined-builtin
        '''
        Get one policy set definition, or list set definitions
        '''
        return self._definition_get('policy_set_definitions', name, id, management_group_name, builtin)

    @command.printable
    def set_definition_new(self, name=None, policy_definitions=None, display_name=None, description=None, metadata=None, parameter=None, management_group_name=None):
        '''
        Create a policy set definition
        '''
        if not name:
            raise self.exc_value("'name' not specified")
        refs = self._policy_definition_references(policy_definitions)
        if not refs:
            raise self.exc_value("'policy_definitions' not specified")
        definition = PolicySetDefinition(display_name=display_name or None,
                                         description=description or None,
                                         metadata=self._json_param(metadata, 'metadata'),
                                         parameters=definition_parameters_build(self._json_param(parameter, 'parameter')),
                                         policy_definitions=refs)
        return self.policy_facade().definition_create_or_update('policy_set_definitions', name, definition, management_group_name=management_group_name or '')

    @command.printable
    def set_definition_set(self, name=None, id=None, policy_definitions=None, display_name=None, description=None, metadata=None, parameter=None, management_group_name=None): # pylint: disable=redefined-builtin
        '''
        Update a policy set definition. Values not given are kept from the existing set definition.
        '''
        facade, name, management_group_name = self._definition_target('policy_set_definitions', name, id, management_group_name)
        existing = facade.definition_get('policy_set_definitions', name, management_group_name=management_group_name)
        if not existing:
            raise self.exc_value("policy set definition %r not found" % (id or name))
        definition = existing.sdk
        if display_name:
            definition.display_name = display_name
        if description:
            definition.description = description
        meta = self._json_param(metadata, 'metadata')
        if meta is not None:
            definition.metadata = meta
        params = self._json_param(parameter, 'parameter')
        if params is not None:
            definition.parameters = definition_parameters_build(params)
        refs = self._policy_definition_references(policy_definitions)
        if refs:
            definition.policy_definitions = refs
        return facade.definition_create_or_update('policy_set_definitions', name, definition, management_group_name=management_group_name)

    @command.simple
    def set_definition_remove(self, name=None, id=None, management_group_name=None): # pylint: disable=redefined-builtin
        '''
        Delete a policy set definition
        '''
        return self._definition_remove('policy_set_definitions', name, id, management_group_name)

Manager.command = command

Manager.main(__name__)
