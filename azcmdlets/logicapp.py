#!/usr/bin/env python3
#
# azcmdlets/logicapp.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
LogicApp cmdlets: workflows, integration accounts, and the integration
account children (maps, schemas, partners, certificates, agreements).
Everything is scoped by --resource_group.
'''
import base64
import re

from azure.mgmt.logic import LogicManagementClient
from azure.mgmt.logic.models import (AgreementContent,
                                     B2BPartnerContent,
                                     BusinessIdentity,
                                     GetCallbackUrlParameters,
                                     IntegrationAccount,
                                     IntegrationAccountAgreement,
                                     IntegrationAccountCertificate,
                                     IntegrationAccountMap,
                                     IntegrationAccountPartner,
                                     IntegrationAccountSchema,
                                     IntegrationAccountSku,
                                     KeyVaultKeyReference,
                                     KeyVaultKeyReferenceKeyVault,
                                     PartnerContent,
                                     ResourceReference,
                                     Workflow,
                                     WorkflowParameter,
                                    )

import azcmdlets.base_defaults
from azcmdlets.btypes import WorkflowState
from azcmdlets.cmdlet import (PresentationModel,
                              ServiceFacade,
                              ServiceManager,
                             )
from azcmdlets.command import Command
from azcmdlets.util import (datetime_normalize,
                            json_or_file_load,
                            text_or_file_load,
                           )

INTEGRATION_ACCOUNT_SKU_DEFAULT = 'Standard'
MAP_TYPE_DEFAULT = 'Xslt'
PARTNER_TYPE_DEFAULT = 'B2B'
SCHEMA_TYPE_DEFAULT = 'Xml'
SCHEMA_CONTENT_TYPE_DEFAULT = 'application/xml'

AGREEMENT_TYPES = ('AS2', 'X12', 'Edifact')

PEM_CERT_RE = re.compile(r'-----BEGIN CERTIFICATE-----(.+?)-----END CERTIFICATE-----', re.DOTALL)

def public_certificate_encode(data):
    '''
    data is the bytes of a certificate file, PEM or DER.
    Return the base64 DER text the service expects.
    '''
    m = PEM_CERT_RE.search(data.decode('ascii', errors='ignore'))
    if m:
        return ''.join(m.group(1).split())
    return base64.b64encode(data).decode('ascii')

def workflow_parameters_build(data):
    '''
    data is a dict of parameter name to value. A value that is a dict
    with a 'value' key is taken as a full parameter declaration.
    A parameters file may nest everything under 'parameters'.
    Returns a dict of name to WorkflowParameter.
    '''
    if isinstance(data.get('parameters', None), dict) and ('value' not in data['parameters']):
        data = data['parameters']
    ret = dict()
    for name, val in data.items():
        if isinstance(val, WorkflowParameter):
            ret[name] = val
        elif isinstance(val, dict) and ('value' in val):
            ret[name] = WorkflowParameter(type=val.get('type', None),
                                          value=val['value'],
                                          metadata=val.get('metadata', None),
                                          description=val.get('description', None))
        else:
            ret[name] = WorkflowParameter(value=val)
    return ret

def business_identities_build(data, exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    data is a list of {"qualifier": q, "value": v} or of [q, v] pairs.
    Returns a list of BusinessIdentity.
    '''
    ret = list()
    for item in data or list():
        if isinstance(item, dict):
            qualifier = item.get('qualifier', None) or item.get('Qualifier', None)
            value = item.get('value', None) or item.get('Value', None)
        elif isinstance(item, (list, tuple)) and (len(item) == 2):
            qualifier, value = item
        else:
            raise exc_value("invalid business identity %r" % (item,))
        if not (qualifier and value):
            raise exc_value("business identity %r must have qualifier and value" % (item,))
        ret.append(BusinessIdentity(qualifier=qualifier, value=value))
    return ret

######################################################################
# presentation models

class WorkflowModel(PresentationModel):
    '''
    azure.mgmt.logic.models.Workflow
    '''
    FIELDS = ('name',
              'id',
              'location',
              'state',
              'version',
              'access_endpoint',
              'provisioning_state',
              ('sku', 'sku.name'),
              ('integration_account_id', 'integration_account.id'),
              'definition',
              'parameters',
              'created_time',
              'changed_time',
              'tags',
             )
    TABLE_COLUMNS = ('name', 'location', 'state')

class CallbackUrlModel(PresentationModel):
    '''
    azure.mgmt.logic.models.WorkflowTriggerCallbackUrl or CallbackUrl
    '''
    FIELDS = ('value',
              'method',
              'base_path',
             )

class IntegrationAccountModel(PresentationModel):
    '''
    azure.mgmt.logic.models.IntegrationAccount
    '''
    FIELDS = ('name',
              'id',
              'location',
              ('sku', 'sku.name'),
              'state',
              'tags',
             )
    TABLE_COLUMNS = ('name', 'location', 'sku')

class IntegrationAccountMapModel(PresentationModel):
    '''
    azure.mgmt.logic.models.IntegrationAccountMap
    '''
    FIELDS = ('name',
              'id',
              'map_type',
              'content_type',
              'content',
              'metadata',
              'created_time',
              'changed_time',
             )
    TABLE_COLUMNS = ('name', 'map_type', 'changed_time')

class IntegrationAccountSchemaModel(PresentationModel):
    '''
    azure.mgmt.logic.models.IntegrationAccountSchema
    '''
    FIELDS = ('name',
              'id',
              'schema_type',
              'target_namespace',
              'document_name',
              'content_type',
              'content',
              'metadata',
              'created_time',
              'changed_time',
             )
    TABLE_COLUMNS = ('name', 'schema_type', 'changed_time')

class IntegrationAccountPartnerModel(PresentationModel):
    '''
    azure.mgmt.logic.models.IntegrationAccountPartner
    '''
    FIELDS = ('name',
              'id',
              'partner_type',
              ('business_identities', 'content.b2_b.business_identities'),
              'metadata',
              'created_time',
              'changed_time',
             )
    TABLE_COLUMNS = ('name', 'partner_type')

    @classmethod
    def from_sdk(cls, obj):
        ret = super().from_sdk(obj)
        if ret is not None:
            ret.business_identities = [{'qualifier' : x.qualifier, 'value' : x.value} for x in (ret.business_identities or list())]
        return ret

class IntegrationAccountCertificateModel(PresentationModel):
    '''
    azure.mgmt.logic.models.IntegrationAccountCertificate
    '''
    FIELDS = ('name',
              'id',
              ('key_name', 'key.key_name'),
              ('key_version', 'key.key_version'),
              ('key_vault_id', 'key.key_vault.id'),
              'public_certificate',
              'metadata',
              'created_time',
              'changed_time',
             )
    TABLE_COLUMNS = ('name', 'key_name', 'changed_time')

class IntegrationAccountAgreementModel(PresentationModel):
    '''
    azure.mgmt.logic.models.IntegrationAccountAgreement
    '''
    FIELDS = ('name',
              'id',
              'agreement_type',
              'host_partner',
              'guest_partner',
              ('host_identity_qualifier', 'host_identity.qualifier'),
              ('host_identity_value', 'host_identity.value'),
              ('guest_identity_qualifier', 'guest_identity.qualifier'),
              ('guest_identity_value', 'guest_identity.value'),
              'content',
              'metadata',
              'created_time',
              'changed_time',
             )
    TABLE_COLUMNS = ('name', 'agreement_type', 'host_partner', 'guest_partner')

# Integration account children: kind -> (operations attribute, model)
IA_CHILDREN = {'map' : ('integration_account_maps', IntegrationAccountMapModel),
               'schema' : ('integration_account_schemas', IntegrationAccountSchemaModel),
               'partner' : ('integration_account_partners', IntegrationAccountPartnerModel),
               'certificate' : ('integration_account_certificates', IntegrationAccountCertificateModel),
               'agreement' : ('integration_account_agreements', IntegrationAccountAgreementModel),
              }

######################################################################
# facade

class LogicAppFacade(ServiceFacade):
    '''
    self.client is azure.mgmt.logic.LogicManagementClient
    '''

    ######################################################################
    # workflows

    def workflow_get(self, resource_group, name):
        '''
        Return WorkflowModel or None
        '''
        return WorkflowModel.from_sdk(self._cw_get(self.client.workflows.get, resource_group, name))

    def _workflow_page(self, resource_group=None, next_link=None):
        '''
        One page of workflows
        '''
        if resource_group:
            return self._cw_page(self.client.workflows.list_by_resource_group, resource_group, next_link=next_link, transform=WorkflowModel.from_sdk)
        return self._cw_page(self.client.workflows.list_by_subscription, next_link=next_link, transform=WorkflowModel.from_sdk)

    def workflow_list(self, resource_group=None, next_link=None, walk=True):
        '''
        List workflows in the resource group or subscription
        '''
        return self._pages(self._workflow_page, resource_group=resource_group, next_link=next_link, walk=walk)

    def workflow_write(self, resource_group, name, workflow):
        '''
        Create or replace the workflow
        '''
        return WorkflowModel.from_sdk(self._cw_call(self.client.workflows.create_or_update, resource_group, name, workflow))

    def workflow_delete(self, resource_group, name):
        '''
        Delete the workflow
        '''
        self._cw_call(self.client.workflows.delete, resource_group, name)

    def workflow_validate(self, resource_group, name, workflow):
        '''
        Validate workflow. Raises when the service rejects it.
        '''
        self._cw_call(self.client.workflows.validate_by_resource_group, resource_group, name, workflow)

    def workflow_callback_url(self, resource_group, name, not_after=None):
        '''
        Return CallbackUrlModel for the workflow
        '''
        params = GetCallbackUrlParameters(not_after=not_after)
        return CallbackUrlModel.from_sdk(self._cw_call(self.client.workflows.list_callback_url, resource_group, name, params))

    def workflow_trigger_callback_url(self, resource_group, name, trigger_name):
        '''
        Return CallbackUrlModel for one trigger
        '''
        return CallbackUrlModel.from_sdk(self._cw_call(self.client.workflow_triggers.list_callback_url, resource_group, name, trigger_name))

    ######################################################################
    # integration accounts

    def integration_account_get(self, resource_group, name):
        '''
        Return IntegrationAccountModel or None
        '''
        return IntegrationAccountModel.from_sdk(self._cw_get(self.client.integration_accounts.get, resource_group, name))

    def _integration_account_page(self, resource_group=None, next_link=None):
        '''
        One page of integration accounts
        '''
        if resource_group:
            return self._cw_page(self.client.integration_accounts.list_by_resource_group, resource_group, next_link=next_link, transform=IntegrationAccountModel.from_sdk)
        return self._cw_page(self.client.integration_accounts.list_by_subscription, next_link=next_link, transform=IntegrationAccountModel.from_sdk)

    def integration_account_list(self, resource_group=None, next_link=None, walk=True):
        '''
        List integration accounts
        '''
        return self._pages(self._integration_account_page, resource_group=resource_group, next_link=next_link, walk=walk)

    def integration_account_write(self, resource_group, name, account):
        '''
        Create or replace the integration account
        '''
        return IntegrationAccountModel.from_sdk(self._cw_call(self.client.integration_accounts.create_or_update, resource_group, name, account))

    def integration_account_delete(self, resource_group, name):
        '''
        Delete the integration account
        '''
        self._cw_call(self.client.integration_accounts.delete, resource_group, name)

    def integration_account_callback_url(self, resource_group, name, not_after=None):
        '''
        Return CallbackUrlModel for the integration account
        '''
        params = GetCallbackUrlParameters(not_after=not_after)
        return CallbackUrlModel.from_sdk(self._cw_call(self.client.integration_accounts.list_callback_url, resource_group, name, params))

    ######################################################################
    # integration account children

    def _child_ops(self, kind):
        '''
        Return (operations, model class) for kind (a key of IA_CHILDREN)
        '''
        ops_name, kls = IA_CHILDREN[kind]
        return (getattr(self.client, ops_name), kls)

    def child_get(self, kind, resource_group, account_name, name):
        '''
        Return the child model or None
        '''
        ops, kls = self._child_ops(kind)
        return kls.from_sdk(self._cw_get(ops.get, resource_group, account_name, name))

    def _child_page(self, kind, resource_group, account_name, next_link=None):
        '''
        One page of children of kind
        '''
        ops, kls = self._child_ops(kind)
        return self._cw_page(ops.list, resource_group, account_name, next_link=next_link, transform=kls.from_sdk)

    def child_list(self, kind, resource_group, account_name, next_link=None, walk=True):
        '''
        List children of kind
        '''
        return self._pages(self._child_page, kind, resource_group, account_name, next_link=next_link, walk=walk)

    def child_write(self, kind, resource_group, account_name, name, obj):
        '''
        Create or replace a child
        '''
        ops, kls = self._child_ops(kind)
        return kls.from_sdk(self._cw_call(ops.create_or_update, resource_group, account_name, name, obj))

    def child_delete(self, kind, resource_group, account_name, name):
        '''
        Delete a child
        '''
        ops, _ = self._child_ops(kind)
        self._cw_call(ops.delete, resource_group, account_name, name)

######################################################################
# cmdlets

command = Command()

class Manager(ServiceManager):
    '''
    LogicApp cmdlets
    '''
    ACTION_ARGS = (('name', {'help' : 'workflow or integration account name'}),
                   ('location', {'help' : 'location'}),
                   ('definition', {'help' : 'workflow definition as JSON'}),
                   ('definition_file_path', {'help' : 'workflow definition file'}),
                   ('parameters', {'help' : 'workflow parameters as JSON'}),
                   ('parameter_file_path', {'help' : 'workflow parameters file'}),
                   ('state', {'help' : 'workflow state (%s)' % ', '.join(WorkflowState.values(sort=False))}),
                   ('integration_account_id', {'help' : 'integration account resource ID'}),
                   ('use_consumption_model', {'action' : 'store_true', 'help' : 'clear the workflow SKU'}),
                   ('trigger_name', {'help' : 'workflow trigger name'}),
                   ('not_after', {'help' : 'callback URL expiry time (ISO 8601)'}),
                   ('sku', {'help' : 'integration account SKU (default %s)' % INTEGRATION_ACCOUNT_SKU_DEFAULT}),
                   ('integration_account_name', {'help' : 'integration account name'}),
                   ('child_name', {'help' : 'map, schema, partner, certificate, or agreement name'}),
                   ('content', {'help' : 'map, schema, or agreement content'}),
                   ('content_file_path', {'help' : 'file holding map, schema, or agreement content'}),
                   ('content_type', {'help' : 'content type'}),
                   ('map_type', {'help' : 'map type (default %s)' % MAP_TYPE_DEFAULT}),
                   ('schema_type', {'help' : 'schema type (default %s)' % SCHEMA_TYPE_DEFAULT}),
                   ('partner_type', {'help' : 'partner type (default %s)' % PARTNER_TYPE_DEFAULT}),
                   ('business_identities', {'help' : 'business identities as a JSON list of {"qualifier","value"}'}),
                   ('key_name', {'help' : 'certificate key name in KeyVault'}),
                   ('key_version', {'help' : 'certificate key version in KeyVault'}),
                   ('key_vault_id', {'help' : 'KeyVault resource ID'}),
                   ('public_certificate_file_path', {'help' : 'public certificate file (PEM or DER)'}),
                   ('agreement_type', {'help' : 'agreement type (%s)' % ', '.join(AGREEMENT_TYPES)}),
                   ('host_partner', {'help' : 'agreement host partner name'}),
                   ('guest_partner', {'help' : 'agreement guest partner name'}),
                   ('host_identity_qualifier', {'help' : 'host business identity qualifier'}),
                   ('host_identity_qualifier_value', {'help' : 'host business identity value'}),
                   ('guest_identity_qualifier', {'help' : 'guest business identity qualifier'}),
                   ('guest_identity_qualifier_value', {'help' : 'guest business identity value'}),
                   ('metadata', {'help' : 'metadata as JSON or a path to a JSON file'}),
                   ('tags', {'help' : 'tags as JSON or a path to a JSON file'}),
                  )

    def logicapp_facade(self):
        '''
        Return LogicAppFacade
        '''
        client = self._az_client_gen_property('logic', LogicManagementClient)
        return LogicAppFacade(client, self.logger, exc_value=self.exc_value)

    def _rg(self):
        '''
        Required resource group
        '''
        return self.resource_group_effective(self.resource_group, exc_value=self.exc_value)

    def _name_required(self, name, key='name'):
        '''
        Raise unless name is given
        '''
        if not name:
            raise self.exc_value("%r not specified" % key)
        return name

    def _metadata(self, metadata):
        '''
        Metadata as a dict or None
        '''
        ret = json_or_file_load(metadata, key='metadata', exc_value=self.exc_value)
        if (ret is not None) and (not isinstance(ret, dict)):
            raise self.exc_value("metadata must be a JSON object")
        return ret

    ######################################################################
    # workflows

    @command.printable
    def workflow_get(self, name=None):
        '''
        Get one workflow, or list workflows in the resource group or subscription
        '''
        facade = self.logicapp_facade()
        if name:
            return facade.workflow_get(self._rg(), name)
        return facade.workflow_list(resource_group=self.resource_group or None)

    @command.simple
    def workflow_remove(self, name=None):
        '''
        Delete a workflow
        '''
        self.logicapp_facade().workflow_delete(self._rg(), self._name_required(name))
        return True

    def _workflow_definition(self, definition, definition_file_path):
        '''
        Workflow definition dict or None
        '''
        txt = text_or_file_load(definition, definition_file_path, key='definition', exc_value=self.exc_value)
        ret = json_or_file_load(txt, key='definition', exc_value=self.exc_value)
        if (ret is not None) and (not isinstance(ret, dict)):
            raise self.exc_value("definition must be a JSON object")
        return ret

    def _workflow_parameters(self, parameters, parameter_file_path):
        '''
        Dict of name to WorkflowParameter, or None
        '''
        txt = text_or_file_load(parameters, parameter_file_path, key='parameter', exc_value=self.exc_value)
        data = json_or_file_load(txt, key='parameters', exc_value=self.exc_value)
        if data is None:
            return None
        if not isinstance(data, dict):
            raise self.exc_value("parameters must be a JSON object")
        return workflow_parameters_build(data)

    @command.printable
    def workflow_update(self, name=None, definition=None, definition_file_path=None, parameters=None, parameter_file_path=None,
                        state=None, integration_account_id=None, use_consumption_model=None):
        '''
        Update a workflow, starting from the existing one
        '''
        resource_group = self._rg()
        name = self._name_required(name)
        facade = self.logicapp_facade()
        existing = facade.workflow_get(resource_group, name)
        if not existing:
            raise self.exc_value("workflow %r not found in resource group %r" % (name, resource_group))
        workflow = existing.sdk
        new_definition = self._workflow_definition(definition, definition_file_path)
        if new_definition is not None:
            workflow.definition = new_definition
        new_parameters = self._workflow_parameters(parameters, parameter_file_path)
        if new_parameters is not None:
            workflow.parameters = new_parameters
        if integration_account_id:
            workflow.integration_account = ResourceReference(id=integration_account_id)
        if state:
            workflow.state = WorkflowState.coerce(state, exc_value=self.exc_value, prefix='state').value
        if use_consumption_model:
            workflow.sku = None
        if not workflow.definition:
            raise self.exc_value("workflow %r has no definition" % name)
        return facade.workflow_write(resource_group, name, workflow)

    @command.simple
    def workflow_validate(self, name=None, location=None, definition=None, definition_file_path=None, parameters=None, parameter_file_path=None):
        '''
        Validate a workflow definition against the service
        '''
        resource_group = self._rg()
        name = self._name_required(name)
        workflow_definition = self._workflow_definition(definition, definition_file_path)
        if workflow_definition is None:
            raise self.exc_value("'definition' not specified")
        workflow = Workflow(location=self._name_required(location, key='location'),
                            definition=workflow_definition,
                            parameters=self._workflow_parameters(parameters, parameter_file_path))
        self.logicapp_facade().workflow_validate(resource_group, name, workflow)
        return True

    @command.printable
    def workflow_callback_url(self, name=None, trigger_name=None, not_after=None):
        '''
        Get the callback URL of a workflow trigger, or of the workflow
        '''
        facade = self.logicapp_facade()
        name = self._name_required(name)
        if trigger_name:
            return facade.workflow_trigger_callback_url(self._rg(), name, trigger_name)
        return facade.workflow_callback_url(self._rg(), name, not_after=datetime_normalize(not_after, key='not_after', exc_value=self.exc_value))

    ######################################################################
    # integration accounts

    @command.printable
    def integration_account_get(self, name=None):
        '''
        Get one integration account, or list them
        '''
        facade = self.logicapp_facade()
        if name:
            return facade.integration_account_get(self._rg(), name)
        return facade.integration_account_list(resource_group=self.resource_group or None)

    @command.printable
    def integration_account_new(self, name=None, location=None, sku=None, tags=None):
        '''
        Create an integration account. An existing account is an error.
        '''
        resource_group = self._rg()
        name = self._name_required(name)
        facade = self.logicapp_facade()
        if facade.integration_account_get(resource_group, name):
            raise self.exc_value("integration account %r already exists in resource group %r" % (name, resource_group))
        account = IntegrationAccount(location=self._name_required(location, key='location'),
                                     sku=IntegrationAccountSku(name=sku or INTEGRATION_ACCOUNT_SKU_DEFAULT),
                                     tags=self.tags_normalize(tags))
        return facade.integration_account_write(resource_group, name, account)

    @command.printable
    def integration_account_set(self, name=None, location=None, sku=None, tags=None):
        '''
        Update an integration account, starting from the existing one
        '''
        resource_group = self._rg()
        name = self._name_required(name)
        facade = self.logicapp_facade()
        existing = facade.integration_account_get(resource_group, name)
        if not existing:
            raise self.exc_value("integration account %r not found in resource group %r" % (name, resource_group))
        account = existing.sdk
        if location:
            account.location = location
        if sku:
            account.sku = IntegrationAccountSku(name=sku)
        tags = self.tags_normalize(tags)
        if tags is not None:
            account.tags = tags
        return facade.integration_account_write(resource_group, name, account)

    @command.simple
    def integration_account_remove(self, name=None):
        '''
        Delete an integration account
        '''
        self.logicapp_facade().integration_account_delete(self._rg(), self._name_required(name))
        return True

    @command.printable
    def integration_account_callback_url(self, name=None, not_after=None):
        '''
        Get the callback URL of an integration account
        '''
        return self.logicapp_facade().integration_account_callback_url(self._rg(),
                                                                       self._name_required(name),
                                                                       not_after=datetime_normalize(not_after, key='not_after', exc_value=self.exc_value))

    ######################################################################
    # integration account children

    def _account_required(self, facade, integration_account_name):
        '''
        Return (resource_group, account name) for an existing account
        '''
        resource_group = self._rg()
        integration_account_name = self._name_required(integration_account_name, key='integration_account_name')
        if not facade.integration_account_get(resource_group, integration_account_name):
            raise self.exc_value("integration account %r not found in resource group %r" % (integration_account_name, resource_group))
        return (resource_group, integration_account_name)

    def _child_get(self, kind, integration_account_name, child_name):
        '''
        Shared get/list for integration account children
        '''
        facade = self.logicapp_facade()
        resource_group = self._rg()
        integration_account_name = self._name_required(integration_account_name, key='integration_account_name')
        if child_name:
            return facade.child_get(kind, resource_group, integration_account_name, child_name)
        return facade.child_list(kind, resource_group, integration_account_name)

    def _child_existing(self, facade, kind, integration_account_name, child_name):
        '''
        Return (resource_group, account name, child model) for an existing child
        '''
        resource_group, integration_account_name = self._account_required(facade, integration_account_name)
        child_name = self._name_required(child_name, key='child_name')
        existing = facade.child_get(kind, resource_group, integration_account_name, child_name)
        if not existing:
            raise self.exc_value("integration account %s %r not found in %r" % (kind, child_name, integration_account_name))
        return (resource_group, integration_account_name, existing)

    def _child_remove(self, kind, integration_account_name, child_name):
        '''
        Shared remove for integration account children
        '''
        self.logicapp_facade().child_delete(kind,
                                            self._rg(),
                                            self._name_required(integration_account_name, key='integration_account_name'),
                                            self._name_required(child_name, key='child_name'))
        return True

    def _content(self, content, content_file_path):
        '''
        Content text from a value or a file, or None
        '''
        return text_or_file_load(content, content_file_path, key='content', exc_value=self.exc_value)

    # maps

    @command.printable
    def integration_account_map_get(self, integration_account_name=None, child_name=None):
        '''
        Get one map, or list maps
        '''
        return self._child_get('map', integration_account_name, child_name)

    @command.printable
    def integration_account_map_new(self, integration_account_name=None, child_name=None, content=None, content_file_path=None,
                                    map_type=None, content_type=None, metadata=None):
        '''
        Create a map
        '''
        facade = self.logicapp_facade()
        resource_group, integration_account_name = self._account_required(facade, integration_account_name)
        map_content = self._content(content, content_file_path)
        if map_content is None:
            raise self.exc_value("one of 'content' or 'content_file_path' must be specified")
        obj = IntegrationAccountMap(map_type=map_type or MAP_TYPE_DEFAULT,
                                    content=map_content,
                                    content_type=content_type or azcmdlets.base_defaults.INTEGRATION_ACCOUNT_MAP_CONTENT_TYPE_DEFAULT,
                                    metadata=self._metadata(metadata))
        return facade.child_write('map', resource_group, integration_account_name, self._name_required(child_name, key='child_name'), obj)

    @command.printable
    def integration_account_map_set(self, integration_account_name=None, child_name=None, content=None, content_file_path=None,
                                    map_type=None, content_type=None, metadata=None):
        '''
        Update a map, starting from the existing one
        '''
        facade = self.logicapp_facade()
        resource_group, integration_account_name, existing = self._child_existing(facade, 'map', integration_account_name, child_name)
        obj = existing.sdk
        # The content link is read-only and rejected on write.
        obj.content_link = None
        map_content = self._content(content, content_file_path)
        if map_content is not None:
            obj.content = map_content
        if content_type:
            obj.content_type = content_type
        if map_type:
            obj.map_type = map_type
        meta = self._metadata(metadata)
        if meta is not None:
            obj.metadata = meta
        return facade.child_write('map', resource_group, integration_account_name, child_name, obj)

    @command.simple
    def integration_account_map_remove(self, integration_account_name=None, child_name=None):
        '''
        Delete a map
        '''
        return self._child_remove('map', integration_account_name, child_name)

    # schemas

    @command.printable
    def integration_account_schema_get(self, integration_account_name=None, child_name=None):
        '''
        Get one schema, or list schemas
        '''
        return self._child_get('schema', integration_account_name, child_name)

    @command.printable
    def integration_account_schema_new(self, integration_account_name=None, child_name=None, content=None, content_file_path=None,
                                       schema_type=None, content_type=None, metadata=None):
        '''
        Create a schema
        '''
        facade = self.logicapp_facade()
        resource_group, integration_account_name = self._account_required(facade, integration_account_name)
        schema_content = self._content(content, content_file_path)
        if schema_content is None:
            raise self.exc_value("one of 'content' or 'content_file_path' must be specified")
        obj = IntegrationAccountSchema(schema_type=schema_type or SCHEMA_TYPE_DEFAULT,
                                       content=schema_content,
                                       content_type=content_type or SCHEMA_CONTENT_TYPE_DEFAULT,
                                       metadata=self._metadata(metadata))
        return facade.child_write('schema', resource_group, integration_account_name, self._name_required(child_name, key='child_name'), obj)

    @command.printable
    def integration_account_schema_set(self, integration_account_name=None, child_name=None, content=None, content_file_path=None,
                                       schema_type=None, content_type=None, metadata=None):
        '''
        Update a schema, starting from the existing one
        '''
        facade = self.logicapp_facade()
        resource_group, integration_account_name, existing = self._child_existing(facade, 'schema', integration_account_name, child_name)
        obj = existing.sdk
        obj.content_link = None
        schema_content = self._content(content, content_file_path)
        if schema_content is not None:
            obj.content = schema_content
        if content_type:
            obj.content_type = content_type
        if schema_type:
            obj.schema_type = schema_type
        meta = self._metadata(metadata)
        if meta is not None:
            obj.metadata = meta
        return facade.child_write('schema', resource_group, integration_account_name, child_name, obj)

    @command.simple
    def integration_account_schema_remove(self, integration_account_name=None, child_name=None):
        '''
        Delete a schema
        '''
        return self._child_remove('schema', integration_account_name, child_name)

    # partners

    def _business_identities(self, business_identities):
        '''
        List of BusinessIdentity or None
        '''
        data = json_or_file_load(business_identities, key='business_identities', exc_value=self.exc_value)
        if data is None:
            return None
        if not isinstance(data, list):
            raise self.exc_value("business_identities must be a JSON list")
        return business_identities_build(data, exc_value=self.exc_value)

    @command.printable
    def integration_account_partner_get(self, integration_account_name=None, child_name=None):
        '''
        Get one partner, or list partners
        '''
        return self._child_get('partner', integration_account_name, child_name)

    @command.printable
    def integration_account_partner_new(self, integration_account_name=None, child_name=None, partner_type=None, business_identities=None, metadata=None):
        '''
        Create a partner
        '''
        facade = self.logicapp_facade()
        resource_group, integration_account_name = self._account_required(facade, integration_account_name)
        identities = self._business_identities(business_identities)
        if not identities:
            raise self.exc_value("'business_identities' not specified")
        obj = IntegrationAccountPartner(partner_type=partner_type or PARTNER_TYPE_DEFAULT,
                                        content=PartnerContent(b2_b=B2BPartnerContent(business_identities=identities)),
                                        metadata=self._metadata(metadata))
        return facade.child_write('partner', resource_group, integration_account_name, self._name_required(child_name, key='child_name'), obj)

    @command.printable
    def integration_account_partner_set(self, integration_account_name=None, child_name=None, partner_type=None, business_identities=None, metadata=None):
        '''
        Update a partner, starting from the existing one
        '''
        facade = self.logicapp_facade()
        resource_group, integration_account_name, existing = self._child_existing(facade, 'partner', integration_account_name, child_name)
        obj = existing.sdk
        if partner_type:
            obj.partner_type = partner_type
        identities = self._business_identities(business_identities)
        if identities is not None:
            obj.content = PartnerContent(b2_b=B2BPartnerContent(business_identities=identities))
        meta = self._metadata(metadata)
        if meta is not None:
            obj.metadata = meta
        return facade.child_write('partner', resource_group, integration_account_name, child_name, obj)

    @command.simple
    def integration_account_partner_remove(self, integration_account_name=None, child_name=None):
        '''
        Delete a partner
        '''
        return self._child_remove('partner', integration_account_name, child_name)

    # certificates

    def _public_certificate(self, public_certificate_file_path):
        '''
        base64 DER text or None
        '''
        if not public_certificate_file_path:
            return None
        try:
            with open(public_certificate_file_path, 'rb') as f:
                data = f.read()
        except OSError as exc:
            raise self.exc_value("cannot read public_certificate_file_path %r: %r" % (public_certificate_file_path, exc)) from exc
        return public_certificate_encode(data)

    def _key_reference(self, key_name, key_version, key_vault_id):
        '''
        KeyVaultKeyReference when all three are given, else None
        '''
        if key_name and key_version and key_vault_id:
            return KeyVaultKeyReference(key_vault=KeyVaultKeyReferenceKeyVault(id=key_vault_id), key_name=key_name, key_version=key_version)
        if key_name or key_version or key_vault_id:
            raise self.exc_value("key_name, key_version, and key_vault_id must be specified together")
        return None

    @command.printable
    def integration_account_certificate_get(self, integration_account_name=None, child_name=None):
        '''
        Get one certificate, or list certificates
        '''
        return self._child_get('certificate', integration_account_name, child_name)

    @command.printable
    def integration_account_certificate_new(self, integration_account_name=None, child_name=None, key_name=None, key_version=None,
                                            key_vault_id=None, public_certificate_file_path=None, metadata=None):
        '''
        Create a certificate
        '''
        facade = self.logicapp_facade()
        resource_group, integration_account_name = self._account_required(facade, integration_account_name)
        obj = IntegrationAccountCertificate(key=self._key_reference(key_name, key_version, key_vault_id),
                                            public_certificate=self._public_certificate(public_certificate_file_path),
                                            metadata=self._metadata(metadata))
        if not (obj.key or obj.public_certificate):
            raise self.exc_value("a KeyVault key reference or a public certificate must be specified")
        return facade.child_write('certificate', resource_group, integration_account_name, self._name_required(child_name, key='child_name'), obj)

    @command.printable
    def integration_account_certificate_set(self, integration_account_name=None, child_name=None, key_name=None, key_version=None,
                                            key_vault_id=None, public_certificate_file_path=None, metadata=None):
        '''
        Update a certificate, starting from the existing one
        '''
        facade = self.logicapp_facade()
        resource_group, integration_account_name, existing = self._child_existing(facade, 'certificate', integration_account_name, child_name)
        obj = existing.sdk
        key = self._key_reference(key_name, key_version, key_vault_id)
        if key:
            obj.key = key
        public_certificate = self._public_certificate(public_certificate_file_path)
        if public_certificate:
            obj.public_certificate = public_certificate
        meta = self._metadata(metadata)
        if meta is not None:
            obj.metadata = meta
        return facade.child_write('certificate', resource_group, integration_account_name, child_name, obj)

    @command.simple
    def integration_account_certificate_remove(self, integration_account_name=None, child_name=None):
        '''
        Delete a certificate
        '''
        return self._child_remove('certificate', integration_account_name, child_name)

    # agreements

    def _partner_identity(self, facade, resource_group, integration_account_name, partner_name, qualifier, value, desc):
        '''
        Return the BusinessIdentity of partner_name matching qualifier and value
        '''
        partner_name = self._name_required(partner_name, key=desc + '_partner')
        partner = facade.child_get('partner', resource_group, integration_account_name, partner_name)
        if not partner:
            raise self.exc_value("%s partner %r not found in %r" % (desc, partner_name, integration_account_name))
        identities = getattr(getattr(partner.sdk.content, 'b2_b', None), 'business_identities', None) or list()
        for identity in identities:
            if (identity.qualifier == qualifier) and (identity.value == value):
                return identity
        raise self.exc_value("business identity qualifier %r value %r not found in %s partner %r" % (qualifier, value, desc, partner_name))

    def _agreement_content(self, content, content_file_path):
        '''
        AgreementContent or None
        '''
        txt = self._content(content, content_file_path)
        data = json_or_file_load(txt, key='content', exc_value=self.exc_value)
        if data is None:
            return None
        if not isinstance(data, dict):
            raise self.exc_value("agreement content must be a JSON object")
        return AgreementContent.from_dict(data)

    def _agreement_type(self, agreement_type):
        '''
        Canonical agreement type
        '''
        match = [x for x in AGREEMENT_TYPES if x.lower() == (agreement_type or '').lower()]
        if not match:
            raise self.exc_value("agreement_type %r is not one of %s" % (agreement_type, ', '.join(AGREEMENT_TYPES)))
        return match[0]

    @command.printable
    def integration_account_agreement_get(self, integration_account_name=None, child_name=None):
        '''
        Get one agreement, or list agreements
        '''
        return self._child_get('agreement', integration_account_name, child_name)

    @command.printable
    def integration_account_agreement_new(self, integration_account_name=None, child_name=None, agreement_type=None,
                                          host_partner=None, guest_partner=None,
                                          host_identity_qualifier=None, host_identity_qualifier_value=None,
                                          guest_identity_qualifier=None, guest_identity_qualifier_value=None,
                                          content=None, content_file_path=None, metadata=None):
        '''
        Create an agreement between two partners of the integration account
        '''
        facade = self.logicapp_facade()
        resource_group, integration_account_name = self._account_required(facade, integration_account_name)
        host_identity = self._partner_identity(facade, resource_group, integration_account_name, host_partner, host_identity_qualifier, host_identity_qualifier_value, 'host')
        guest_identity = self._partner_identity(facade, resource_group, integration_account_name, guest_partner, guest_identity_qualifier, guest_identity_qualifier_value, 'guest')
        agreement_content = self._agreement_content(content, content_file_path)
        if agreement_content is None:
            raise self.exc_value("one of 'content' or 'content_file_path' must be specified")
        obj = IntegrationAccountAgreement(agreement_type=self._agreement_type(agreement_type),
                                          host_partner=host_partner,
                                          guest_partner=guest_partner,
                                          host_identity=host_identity,
                                          guest_identity=guest_identity,
                                          content=agreement_content,
                                          metadata=self._metadata(metadata))
        return facade.child_write('agreement', resource_group, integration_account_name, self._name_required(child_name, key='child_name'), obj)

    @command.printable
    def integration_account_agreement_set(self, integration_account_name=None, child_name=None, agreement_type=None,
                                          host_partner=None, guest_partner=None,
                                          host_identity_qualifier=None, host_identity_qualifier_value=None,
                                          guest_identity_qualifier=None, guest_identity_qualifier_value=None,
                                          content=None, content_file_path=None, metadata=None):
        '''
        Update an agreement, starting from the existing one.
        Identities are looked up on the (possibly new) partners.
        '''
        facade = self.logicapp_facade()
        resource_group, integration_account_name, existing = self._child_existing(facade, 'agreement', integration_account_name, child_name)
        obj = existing.sdk
        if agreement_type:
            obj.agreement_type = self._agreement_type(agreement_type)
        if host_partner or host_identity_qualifier or host_identity_qualifier_value:
            obj.host_partner = host_partner or obj.host_partner
            obj.host_identity = self._partner_identity(facade, resource_group, integration_account_name, obj.host_partner,
                                                       host_identity_qualifier or obj.host_identity.qualifier,
                                                       host_identity_qualifier_value or obj.host_identity.value,
                                                       'host')
        if guest_partner or guest_identity_qualifier or guest_identity_qualifier_value:
            obj.guest_partner = guest_partner or obj.guest_partner
            obj.guest_identity = self._partner_identity(facade, resource_group, integration_account_name, obj.guest_partner,
                                                        guest_identity_qualifier or obj.guest_identity.qualifier,
                                                        guest_identity_qualifier_value or obj.guest_identity.value,
                                                        'guest')
        agreement_content = self._agreement_content(content, content_file_path)
        if agreement_content is not None:
            obj.content = agreement_content
        meta = self._metadata(metadata)
        if meta is not None:
            obj.metadata = meta
        return facade.child_write('agreement', resource_group, integration_account_name, child_name, obj)

    @command.simple
    def integration_account_agreement_remove(self, integration_account_name=None, child_name=None):
        '''
        Delete an agreement
        '''
        return self._child_remove('agreement', integration_account_name, child_name)

Manager.command = command

Manager.main(__name__)
