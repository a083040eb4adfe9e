#
# tests/test_policy.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Policy cmdlets against a mocked PolicyClient
'''
from unittest.mock import MagicMock

from azure.mgmt.resource.policy.models import (ParameterValuesValue,
                                               PolicyAssignment,
                                               PolicyDefinition,
                                              )
import pytest

from azcmdlets.exceptions import ParameterSetError
from azcmdlets.policy import (Manager,
                              POLICY_DEFINITION_MUTEX_TXT,
                              assignment_parameters_build,
                              policy_definition_id_parse,
                             )

from .conftest import (SUBSCRIPTION_ID,
                       not_found,
                       sdk_obj,
                      )

RG_SCOPE = '/subscriptions/%s/resourceGroups/rg1' % SUBSCRIPTION_ID
NSG_SCOPE = RG_SCOPE + '/providers/Microsoft.Network/networkSecurityGroups/nsg1'
DEFINITION_ID = '/subscriptions/%s/providers/Microsoft.Authorization/policyDefinitions/def1' % SUBSCRIPTION_ID
BUILTIN_ID = '/providers/Microsoft.Authorization/policyDefinitions/builtin1'
MG_SET_ID = '/providers/Microsoft.Management/managementGroups/mg1/providers/Microsoft.Authorization/policySetDefinitions/set1'

@pytest.fixture
def policy(manager_make):
    mgr = manager_make(Manager)
    client = MagicMock()
    mgr.az_client_set('policy', client)
    return (mgr, client)

class TestDefinitionIds:
    '''
    policy_definition_id_parse
    '''
    def test_subscription(self):
        assert policy_definition_id_parse(DEFINITION_ID) == {'subscription_id' : SUBSCRIPTION_ID, 'management_group_name' : '', 'name' : 'def1'}

    def test_builtin(self):
        assert policy_definition_id_parse(BUILTIN_ID) == {'subscription_id' : '', 'management_group_name' : '', 'name' : 'builtin1'}

    def test_management_group_set(self):
        res = policy_definition_id_parse(MG_SET_ID, kind='policySetDefinitions')
        assert res['management_group_name'] == 'mg1'
        assert res['name'] == 'set1'

    def test_wrong_kind(self):
        with pytest.raises(ValueError):
            policy_definition_id_parse(MG_SET_ID)

    def test_parameters_build(self):
        res = assignment_parameters_build({'a' : {'value' : 1}, 'b' : [1, 2], 'c' : {'value' : 1, 'other' : 2}})
        assert res['a'].value == 1
        assert res['b'].value == [1, 2]
        assert res['c'].value == {'value' : 1, 'other' : 2}

class TestAssignments:
    '''
    Policy assignment cmdlets
    '''
    def test_get_by_name(self, policy):
        mgr, client = policy
        client.policy_assignments.get.return_value = sdk_obj(name='a1', scope=RG_SCOPE)
        res = mgr.assignment_get(name='a1', scope=RG_SCOPE)
        assert res.name == 'a1'
        client.policy_assignments.get.assert_called_once_with(RG_SCOPE, 'a1')

    def test_get_missing(self, policy):
        mgr, client = policy
        client.policy_assignments.get.side_effect = not_found()
        assert mgr.assignment_get(name='a1', scope=RG_SCOPE) is None

    def test_list_at_resource_group_scope(self, policy):
        mgr, client = policy
        client.policy_assignments.list_for_resource_group.return_value = [sdk_obj(name='a1'), sdk_obj(name='a2')]
        res = mgr.assignment_get(scope=RG_SCOPE)
        assert [x.name for x in res] == ['a1', 'a2']
        client.policy_assignments.list_for_resource_group.assert_called_once_with('rg1', filter='atScope()')

    def test_list_at_resource_scope(self, policy):
        mgr, client = policy
        client.policy_assignments.list_for_resource.return_value = list()
        assert mgr.assignment_get(scope=NSG_SCOPE) == []
        client.policy_assignments.list_for_resource.assert_called_once_with('rg1', 'Microsoft.Network', '', 'networkSecurityGroups', 'nsg1', filter='atScope()')

    def test_list_all_by_definition(self, policy):
        mgr, client = policy
        client.policy_assignments.list.return_value = [sdk_obj(name='a1', policy_definition_id=DEFINITION_ID)]
        res = mgr.assignment_get(policy_definition_id=DEFINITION_ID)
        assert res[0].policy_definition_id == DEFINITION_ID
        client.policy_assignments.list.assert_called_once_with(filter="policyDefinitionId eq '%s'" % DEFINITION_ID)

    def test_get_by_id(self, policy):
        mgr, client = policy
        mgr.assignment_get(id=RG_SCOPE+'/providers/Microsoft.Authorization/policyAssignments/a1')
        client.policy_assignments.get_by_id.assert_called_once_with(RG_SCOPE+'/providers/Microsoft.Authorization/policyAssignments/a1')

    def test_get_id_and_name_conflict(self, policy):
        mgr, _ = policy
        with pytest.raises(ParameterSetError):
            mgr.assignment_get(id='/x', name='a1')

    def test_new(self, policy):
        mgr, client = policy
        client.policy_assignments.create.side_effect = lambda scope, name, assignment: assignment
        res = mgr.assignment_new(name='a1', scope=RG_SCOPE, policy_definition=DEFINITION_ID,
                                 policy_parameter='{"parameters": {"effect": {"value": "Deny"}}}',
                                 not_scope='%s/x,%s/y' % (RG_SCOPE, RG_SCOPE))
        scope, name, assignment = client.policy_assignments.create.call_args[0]
        assert (scope, name) == (RG_SCOPE, 'a1')
        assert isinstance(assignment, PolicyAssignment)
        assert assignment.parameters['effect'].value == 'Deny'
        assert res.not_scopes == [RG_SCOPE+'/x', RG_SCOPE+'/y']

    def test_new_parameter_object(self, policy):
        mgr, client = policy
        mgr.assignment_new(name='a1', scope=RG_SCOPE, policy_set_definition=MG_SET_ID, policy_parameter_object={'tagName' : 'env'})
        assignment = client.policy_assignments.create.call_args[0][2]
        assert isinstance(assignment.parameters['tagName'], ParameterValuesValue)
        assert assignment.parameters['tagName'].value == 'env'
        assert assignment.policy_definition_id == MG_SET_ID

    def test_new_definition_mutex(self, policy):
        mgr, client = policy
        with pytest.raises(ValueError) as exc_info:
            mgr.assignment_new(name='a1', scope=RG_SCOPE, policy_definition=DEFINITION_ID, policy_set_definition=MG_SET_ID)
        assert str(exc_info.value) == POLICY_DEFINITION_MUTEX_TXT
        client.policy_assignments.create.assert_not_called()

    def test_new_definition_object_without_id(self, policy):
        mgr, _ = policy
        with pytest.raises(ValueError):
            mgr.assignment_new(name='a1', scope=RG_SCOPE, policy_definition=sdk_obj(id=None))

    def test_new_identity_requires_location(self, policy):
        mgr, client = policy
        with pytest.raises(ValueError):
            mgr.assignment_new(name='a1', scope=RG_SCOPE, policy_definition=DEFINITION_ID, assign_identity=True)
        mgr.assignment_new(name='a1', scope=RG_SCOPE, policy_definition=DEFINITION_ID, assign_identity=True, location='westus2')
        assignment = client.policy_assignments.create.call_args[0][2]
        assert assignment.identity.type == 'SystemAssigned'
        assert assignment.location == 'westus2'

    def test_set_merges(self, policy):
        mgr, client = policy
        existing = PolicyAssignment(display_name='old', description='keep me', policy_definition_id=DEFINITION_ID)
        client.policy_assignments.get.return_value = existing
        mgr.assignment_set(name='a1', scope=RG_SCOPE, display_name='new')
        scope, name, assignment = client.policy_assignments.create.call_args[0]
        assert (scope, name) == (RG_SCOPE, 'a1')
        assert assignment.display_name == 'new'
        assert assignment.description == 'keep me'

    def test_set_does_not_send_scope(self, policy):
        mgr, client = policy
        existing = PolicyAssignment(display_name='old', policy_definition_id=DEFINITION_ID)
        existing.scope = RG_SCOPE
        client.policy_assignments.get.return_value = existing
        mgr.assignment_set(name='a1', scope=RG_SCOPE, description='new')
        assignment = client.policy_assignments.create.call_args[0][2]
        assert assignment.scope is None
        assert assignment.display_name == 'old'

    def test_set_by_id_does_not_send_scope(self, policy):
        mgr, client = policy
        assignment_id = RG_SCOPE + '/providers/Microsoft.Authorization/policyAssignments/a1'
        existing = PolicyAssignment(display_name='old', policy_definition_id=DEFINITION_ID)
        existing.scope = RG_SCOPE
        client.policy_assignments.get_by_id.return_value = existing
        mgr.assignment_set(id=assignment_id, not_scope=NSG_SCOPE)
        sent_id, assignment = client.policy_assignments.create_by_id.call_args[0]
        assert sent_id == assignment_id
        assert assignment.scope is None
        assert assignment.not_scopes == [NSG_SCOPE]

    def test_set_missing(self, policy):
        mgr, client = policy
        client.policy_assignments.get.side_effect = not_found()
        with pytest.raises(ValueError):
            mgr.assignment_set(name='a1', scope=RG_SCOPE, display_name='new')

    def test_remove_by_id(self, policy):
        mgr, client = policy
        mgr.assignment_remove(id='/some/assignment/id')
        client.policy_assignments.delete_by_id.assert_called_once_with('/some/assignment/id')

class TestDefinitions:
    '''
    Policy definition and set definition cmdlets
    '''
    def test_get_falls_back_to_builtin(self, policy):
        mgr, client = policy
        client.policy_definitions.get.side_effect = not_found()
        client.policy_definitions.get_built_in.return_value = sdk_obj(name='def1', policy_type='BuiltIn')
        res = mgr.definition_get(name='def1')
        assert res.policy_type == 'BuiltIn'

    def test_get_builtin_by_id(self, policy):
        mgr, client = policy
        mgr.definition_get(id=BUILTIN_ID)
        client.policy_definitions.get_built_in.assert_called_once_with('builtin1')

    def test_list_management_group(self, policy):
        mgr, client = policy
        client.policy_definitions.list_by_management_group.return_value = [sdk_obj(name='d')]
        assert [x.name for x in mgr.definition_get(management_group_name='mg1')] == ['d']
        client.policy_definitions.list_by_management_group.assert_called_once_with('mg1')

    def test_list_builtin(self, policy):
        mgr, client = policy
        client.policy_definitions.list_built_in.return_value = [sdk_obj(name='b')]
        assert [x.name for x in mgr.definition_get(builtin=True)] == ['b']

    def test_new(self, policy):
        mgr, client = policy
        mgr.definition_new(name='def1', policy='{"if": {"field": "type", "equals": "x"}, "then": {"effect": "deny"}}',
                           parameter='{"effect": {"type": "String"}}', mode='indexed')
        name, definition = client.policy_definitions.create_or_update.call_args[0]
        assert name == 'def1'
        assert isinstance(definition, PolicyDefinition)
        assert definition.mode == 'Indexed'
        assert definition.policy_rule['then'] == {'effect' : 'deny'}
        assert definition.parameters['effect'].type == 'String'

    def test_new_requires_rule(self, policy):
        mgr, _ = policy
        with pytest.raises(ValueError):
            mgr.definition_new(name='def1')
        with pytest.raises(ValueError):
            mgr.definition_new(name='def1', policy='{}', mode='Sometimes')

    def test_set_at_management_group(self, policy):
        mgr, client = policy
        client.policy_set_definitions.get_at_management_group.return_value = set_definition_sdk()
        mgr.set_definition_set(id=MG_SET_ID, description='updated')
        name, mg, definition = client.policy_set_definitions.create_or_update_at_management_group.call_args[0]
        assert (name, mg) == ('set1', 'mg1')
        assert definition.description == 'updated'

    def test_builtin_may_not_be_modified(self, policy):
        mgr, client = policy
        with pytest.raises(ValueError):
            mgr.definition_set(id=BUILTIN_ID, description='x')
        with pytest.raises(ValueError):
            mgr.definition_remove(id=BUILTIN_ID)
        client.policy_definitions.delete.assert_not_called()

    def test_remove(self, policy):
        mgr, client = policy
        assert mgr.definition_remove(name='def1') is None
        client.policy_definitions.delete.assert_called_once_with('def1')

    def test_set_definition_new_requires_members(self, policy):
        mgr, client = policy
        with pytest.raises(ValueError):
            mgr.set_definition_new(name='set1', policy_definitions='[]')
        mgr.set_definition_new(name='set1', policy_definitions=[{'policyDefinitionId' : DEFINITION_ID}])
        name, definition = client.policy_set_definitions.create_or_update.call_args[0]
        assert name == 'set1'
        assert definition.policy_definitions[0].policy_definition_id == DEFINITION_ID

def set_definition_sdk():
    '''
    An existing set definition as the SDK returns it
    '''
    return sdk_obj(name='set1', id=MG_SET_ID, policy_type='Custom', display_name='Set', description='old',
                   parameters=None, metadata=None, policy_definitions=[])
