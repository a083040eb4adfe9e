#
# tests/test_logicapp.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
LogicApp workflow and integration account cmdlets
'''
import base64
import json
from unittest.mock import MagicMock

from azure.mgmt.logic.models import (B2BPartnerContent,
                                     BusinessIdentity,
                                     IntegrationAccountMap,
                                     IntegrationAccountPartner,
                                     PartnerContent,
                                     WorkflowParameter,
                                    )
import pytest

from azcmdlets.logicapp import (Manager,
                                business_identities_build,
                                public_certificate_encode,
                                workflow_parameters_build,
                               )

from .conftest import (RESOURCE_GROUP,
                       not_found,
                       sdk_obj,
                      )

ACCOUNT = 'ia0'

DEFINITION = {'$schema' : 'https://schema.management.azure.com/providers/Microsoft.Logic/schemas/2016-06-01/workflowdefinition.json#',
              'triggers' : {},
              'actions' : {},
             }

@pytest.fixture
def logic(manager_make):
    mgr = manager_make(Manager)
    client = MagicMock()
    mgr.az_client_set('logic', client)
    return (mgr, client)

def written(*args):
    '''
    create_or_update side effect: echo the object written
    '''
    return args[-1]

def partner_sdk(name, *identities):
    ret = IntegrationAccountPartner(partner_type='B2B',
                                    content=PartnerContent(b2_b=B2BPartnerContent(business_identities=[BusinessIdentity(qualifier=q, value=v) for q, v in identities])))
    ret.name = name
    return ret

def with_account(client):
    client.integration_accounts.get.return_value = sdk_obj(name=ACCOUNT, location='eastus')

class TestHelpers:
    '''
    Helpers that do not talk to Azure
    '''
    def test_parameters_build(self):
        res = workflow_parameters_build({'plain' : 'x', 'full' : {'type' : 'String', 'value' : 'y'}})
        assert res['plain'].value == 'x'
        assert res['plain'].type is None
        assert (res['full'].type, res['full'].value) == ('String', 'y')

    def test_parameters_unwrap(self):
        res = workflow_parameters_build({'parameters' : {'a' : {'value' : 1}}})
        assert list(res.keys()) == ['a']
        assert res['a'].value == 1

    def test_parameters_named_parameters(self):
        res = workflow_parameters_build({'parameters' : {'value' : 'p'}})
        assert isinstance(res['parameters'], WorkflowParameter)
        assert res['parameters'].value == 'p'

    def test_business_identities(self):
        res = business_identities_build([{'qualifier' : 'ZZ', 'value' : 'A'}, ['01', 'B']])
        assert [(x.qualifier, x.value) for x in res] == [('ZZ', 'A'), ('01', 'B')]

    def test_business_identities_invalid(self):
        with pytest.raises(ValueError):
            business_identities_build([{'qualifier' : 'ZZ'}])
        with pytest.raises(ValueError):
            business_identities_build(['ZZ'])

    def test_public_certificate_der(self):
        data = b'\x30\x82\x01\x0a'
        assert public_certificate_encode(data) == base64.b64encode(data).decode('ascii')

    def test_public_certificate_pem(self):
        pem = b'-----BEGIN CERTIFICATE-----\nMIIB\nCgAA\n-----END CERTIFICATE-----\n'
        assert public_certificate_encode(pem) == 'MIIBCgAA'

class TestWorkflows:
    '''
    Workflow cmdlets
    '''
    def test_get_missing(self, logic):
        mgr, client = logic
        client.workflows.get.side_effect = not_found()
        assert mgr.workflow_get(name='wf') is None

    def test_update_keeps_definition(self, logic):
        mgr, client = logic
        client.workflows.get.return_value = sdk_obj(name='wf', location='eastus', state='Enabled', definition=dict(DEFINITION),
                                                     parameters={'p' : WorkflowParameter(value=1)}, integration_account=None, sku=None)
        client.workflows.create_or_update.side_effect = written
        res = mgr.workflow_update(name='wf', state='disabled')
        assert res.state == 'Disabled'
        assert res.definition == DEFINITION
        assert res.parameters['p'].value == 1

    def test_update_replaces_parameters(self, logic, tmp_path):
        mgr, client = logic
        client.workflows.get.return_value = sdk_obj(name='wf', definition=dict(DEFINITION), parameters={'old' : WorkflowParameter(value=0)},
                                                     integration_account=None, state='Enabled', sku=None)
        client.workflows.create_or_update.side_effect = written
        path = tmp_path / 'params.json'
        path.write_text(json.dumps({'parameters' : {'new' : {'value' : 'v'}}}))
        res = mgr.workflow_update(name='wf', parameter_file_path=str(path))
        assert list(res.parameters.keys()) == ['new']

    def test_update_no_definition(self, logic):
        mgr, client = logic
        client.workflows.get.return_value = sdk_obj(name='wf', definition=None, parameters=None, state='Enabled', sku=None)
        with pytest.raises(ValueError) as exc_info:
            mgr.workflow_update(name='wf', state='Enabled')
        assert 'no definition' in str(exc_info.value)
        client.workflows.create_or_update.assert_not_called()

    def test_update_missing(self, logic):
        mgr, client = logic
        client.workflows.get.side_effect = not_found()
        with pytest.raises(ValueError):
            mgr.workflow_update(name='wf', definition=json.dumps(DEFINITION))

    def test_update_definition_and_file(self, logic, tmp_path):
        mgr, client = logic
        client.workflows.get.return_value = sdk_obj(name='wf', definition=dict(DEFINITION), parameters=None, state='Enabled', sku=None)
        path = tmp_path / 'def.json'
        path.write_text(json.dumps(DEFINITION))
        with pytest.raises(ValueError):
            mgr.workflow_update(name='wf', definition=json.dumps(DEFINITION), definition_file_path=str(path))

    def test_validate(self, logic):
        mgr, client = logic
        assert mgr.workflow_validate(name='wf', location='eastus', definition=json.dumps(DEFINITION))
        args = client.workflows.validate_by_resource_group.call_args[0]
        assert args[:2] == (RESOURCE_GROUP, 'wf')
        assert args[2].definition == DEFINITION

    def test_callback_url_trigger(self, logic):
        mgr, client = logic
        client.workflow_triggers.list_callback_url.return_value = sdk_obj(value='https://trigger', method='POST')
        res = mgr.workflow_callback_url(name='wf', trigger_name='manual')
        assert res.value == 'https://trigger'
        client.workflows.list_callback_url.assert_not_called()

    def test_callback_url_workflow(self, logic):
        mgr, client = logic
        client.workflows.list_callback_url.return_value = sdk_obj(value='https://workflow')
        assert mgr.workflow_callback_url(name='wf').value == 'https://workflow'

class TestIntegrationAccounts:
    '''
    Integration accounts
    '''
    def test_new_default_sku(self, logic):
        mgr, client = logic
        client.integration_accounts.get.side_effect = not_found()
        client.integration_accounts.create_or_update.side_effect = written
        res = mgr.integration_account_new(name=ACCOUNT, location='eastus')
        assert res.sku == 'Standard'

    def test_new_exists(self, logic):
        mgr, client = logic
        with_account(client)
        with pytest.raises(ValueError) as exc_info:
            mgr.integration_account_new(name=ACCOUNT, location='eastus')
        assert 'already exists' in str(exc_info.value)

    def test_set_sku(self, logic):
        mgr, client = logic
        client.integration_accounts.get.return_value = sdk_obj(name=ACCOUNT, location='eastus', sku=sdk_obj(name='Free'), tags={'a' : 'b'})
        client.integration_accounts.create_or_update.side_effect = written
        res = mgr.integration_account_set(name=ACCOUNT, sku='Basic')
        assert res.sku == 'Basic'
        assert res.tags == {'a' : 'b'}

class TestChildren:
    '''
    Maps, schemas, partners, certificates, and agreements
    '''
    def test_child_requires_account(self, logic):
        mgr, client = logic
        client.integration_accounts.get.side_effect = not_found()
        with pytest.raises(ValueError) as exc_info:
            mgr.integration_account_map_new(integration_account_name=ACCOUNT, child_name='m', content='<xsl/>')
        assert 'not found' in str(exc_info.value)

    def test_map_new_defaults(self, logic):
        mgr, client = logic
        with_account(client)
        client.integration_account_maps.create_or_update.side_effect = written
        res = mgr.integration_account_map_new(integration_account_name=ACCOUNT, child_name='m', content='<xsl/>')
        assert res.map_type == 'Xslt'
        assert res.content_type == 'application/xml'

    def test_map_set_clears_content_link(self, logic):
        mgr, client = logic
        with_account(client)
        existing = IntegrationAccountMap(map_type='Xslt', content='<old/>', content_type='application/xml')
        existing.content_link = sdk_obj(uri='https://blob')
        client.integration_account_maps.get.return_value = existing
        client.integration_account_maps.create_or_update.side_effect = written
        res = mgr.integration_account_map_set(integration_account_name=ACCOUNT, child_name='m', content='<new/>')
        assert res.content == '<new/>'
        assert res.sdk.content_link is None

    def test_schema_new_defaults(self, logic):
        mgr, client = logic
        with_account(client)
        client.integration_account_schemas.create_or_update.side_effect = written
        res = mgr.integration_account_schema_new(integration_account_name=ACCOUNT, child_name='s', content='<xs:schema/>')
        assert (res.schema_type, res.content_type) == ('Xml', 'application/xml')

    def test_partner_new(self, logic):
        mgr, client = logic
        with_account(client)
        client.integration_account_partners.create_or_update.side_effect = written
        res = mgr.integration_account_partner_new(integration_account_name=ACCOUNT, child_name='p',
                                                  business_identities='[{"qualifier": "ZZ", "value": "HOST"}]')
        assert res.partner_type == 'B2B'
        assert res.business_identities == [{'qualifier' : 'ZZ', 'value' : 'HOST'}]

    def test_partner_identities_must_be_list(self, logic):
        mgr, client = logic
        with_account(client)
        with pytest.raises(ValueError):
            mgr.integration_account_partner_new(integration_account_name=ACCOUNT, child_name='p',
                                                business_identities='{"qualifier": "ZZ", "value": "HOST"}')

    def test_certificate_key_parts_together(self, logic):
        mgr, client = logic
        with_account(client)
        with pytest.raises(ValueError):
            mgr.integration_account_certificate_new(integration_account_name=ACCOUNT, child_name='c', key_name='k')

    def test_certificate_needs_key_or_cert(self, logic):
        mgr, client = logic
        with_account(client)
        with pytest.raises(ValueError):
            mgr.integration_account_certificate_new(integration_account_name=ACCOUNT, child_name='c')

    def test_certificate_from_file(self, logic, tmp_path):
        mgr, client = logic
        with_account(client)
        client.integration_account_certificates.create_or_update.side_effect = written
        path = tmp_path / 'cert.cer'
        path.write_bytes(b'\x30\x82\x00\x01')
        res = mgr.integration_account_certificate_new(integration_account_name=ACCOUNT, child_name='c', public_certificate_file_path=str(path))
        assert res.public_certificate == base64.b64encode(b'\x30\x82\x00\x01').decode('ascii')
        assert res.key_name is None

    def test_agreement_new(self, logic):
        mgr, client = logic
        with_account(client)
        partners = {'host' : partner_sdk('host', ('ZZ', 'HOST')),
                    'guest' : partner_sdk('guest', ('ZZ', 'GUEST'), ('01', 'G1')),
                   }
        def partner_get(resource_group, account_name, name):
            if name not in partners:
                raise not_found()
            return partners[name]
        client.integration_account_partners.get.side_effect = partner_get
        client.integration_account_agreements.create_or_update.side_effect = written
        res = mgr.integration_account_agreement_new(integration_account_name=ACCOUNT, child_name='a', agreement_type='x12',
                                                    host_partner='host', guest_partner='guest',
                                                    host_identity_qualifier='ZZ', host_identity_qualifier_value='HOST',
                                                    guest_identity_qualifier='01', guest_identity_qualifier_value='G1',
                                                    content='{}')
        assert res.agreement_type == 'X12'
        assert (res.guest_identity_qualifier, res.guest_identity_value) == ('01', 'G1')

    def test_agreement_identity_not_found(self, logic):
        mgr, client = logic
        with_account(client)
        client.integration_account_partners.get.return_value = partner_sdk('host', ('ZZ', 'HOST'))
        with pytest.raises(ValueError) as exc_info:
            mgr.integration_account_agreement_new(integration_account_name=ACCOUNT, child_name='a', agreement_type='AS2',
                                                  host_partner='host', guest_partner='host',
                                                  host_identity_qualifier='ZZ', host_identity_qualifier_value='NOPE',
                                                  guest_identity_qualifier='ZZ', guest_identity_qualifier_value='HOST',
                                                  content='{}')
        assert 'not found' in str(exc_info.value)

    def test_agreement_bad_type(self, logic):
        mgr, client = logic
        with_account(client)
        client.integration_account_partners.get.return_value = partner_sdk('p', ('ZZ', 'X'))
        with pytest.raises(ValueError):
            mgr.integration_account_agreement_new(integration_account_name=ACCOUNT, child_name='a', agreement_type='EDI',
                                                  host_partner='p', guest_partner='p',
                                                  host_identity_qualifier='ZZ', host_identity_qualifier_value='X',
                                                  guest_identity_qualifier='ZZ', guest_identity_qualifier_value='X',
                                                  content='{}')

    def test_remove(self, logic):
        mgr, client = logic
        assert mgr.integration_account_schema_remove(integration_account_name=ACCOUNT, child_name='s')
        client.integration_account_schemas.delete.assert_called_once_with(RESOURCE_GROUP, ACCOUNT, 's')
