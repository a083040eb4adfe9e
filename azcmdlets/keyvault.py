#!/usr/bin/env python3
#
# azcmdlets/keyvault.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
KeyVault data-plane cmdlets: keys, secrets, certificates,
certificate operations, policies, contacts, and issuers.
'''
import base64
import os
import re

import azure.keyvault.certificates
from azure.keyvault.certificates import (CertificateContact,
                                         CertificateContentType,
                                         CertificatePolicy,
                                        )
import azure.keyvault.keys
from azure.keyvault.keys import JsonWebKey
import azure.keyvault.secrets

import azcmdlets.base_defaults
import azcmdlets.clouds
from azcmdlets.btypes import KeyVaultKeyType
from azcmdlets.cmdlet import (PresentationModel,
                              ServiceFacade,
                              ServiceManager,
                             )
from azcmdlets.command import Command
from azcmdlets.output import output_redact
from azcmdlets.parametersets import ParameterSet
from azcmdlets.util import (datetime_normalize,
                            json_or_file_load,
                            stringlist_normalize,
                           )

RE_KEYVAULT_OBJECT_NAME_ABS = re.compile(azcmdlets.base_defaults.KEYVAULT_OBJECT_NAME_RE_TXT)
RE_KEYVAULT_VAULT_NAME_ABS = re.compile(azcmdlets.base_defaults.KEYVAULT_VAULT_NAME_RE_TXT)

# JWK members that are base64url-encoded byte strings
JWK_BYTES_FIELDS = ('n', 'e', 'd', 'dp', 'dq', 'qi', 'p', 'q', 'k', 't', 'x', 'y')

PEM_CERT_RE = re.compile(rb'-----BEGIN CERTIFICATE-----(.+?)-----END CERTIFICATE-----', re.DOTALL)

######################################################################
# presentation models

class KeyModel(PresentationModel):
    '''
    azure.keyvault.keys.KeyVaultKey
    '''
    FIELDS = ('name',
              ('version', 'properties.version'),
              'id',
              'key_type',
              ('key_ops', 'key_operations'),
              ('enabled', 'properties.enabled'),
              ('not_before', 'properties.not_before'),
              ('expires', 'properties.expires_on'),
              ('created', 'properties.created_on'),
              ('updated', 'properties.updated_on'),
              ('recovery_level', 'properties.recovery_level'),
              ('tags', 'properties.tags'),
             )
    TABLE_COLUMNS = ('name', 'version', 'key_type', 'enabled', 'expires')

class KeyPropertiesModel(PresentationModel):
    '''
    azure.keyvault.keys.KeyProperties (list item)
    '''
    FIELDS = ('name',
              'version',
              'id',
              'enabled',
              'not_before',
              ('expires', 'expires_on'),
              ('created', 'created_on'),
              ('updated', 'updated_on'),
              'managed',
              'tags',
             )
    TABLE_COLUMNS = ('name', 'version', 'enabled', 'expires')

class DeletedKeyModel(PresentationModel):
    '''
    azure.keyvault.keys.DeletedKey
    '''
    FIELDS = ('name',
              'id',
              'key_type',
              'recovery_id',
              'deleted_date',
              'scheduled_purge_date',
              ('enabled', 'properties.enabled'),
              ('tags', 'properties.tags'),
             )
    TABLE_COLUMNS = ('name', 'deleted_date', 'scheduled_purge_date')

class SecretModel(PresentationModel):
    '''
    azure.keyvault.secrets.KeyVaultSecret
    '''
    FIELDS = ('name',
              ('version', 'properties.version'),
              'id',
              'value',
              ('content_type', 'properties.content_type'),
              ('enabled', 'properties.enabled'),
              ('not_before', 'properties.not_before'),
              ('expires', 'properties.expires_on'),
              ('created', 'properties.created_on'),
              ('updated', 'properties.updated_on'),
              ('tags', 'properties.tags'),
             )
    TABLE_COLUMNS = ('name', 'version', 'content_type', 'enabled')

class SecretPropertiesModel(PresentationModel):
    '''
    azure.keyvault.secrets.SecretProperties (list item)
    '''
    FIELDS = ('name',
              'version',
              'id',
              'content_type',
              'enabled',
              'not_before',
              ('expires', 'expires_on'),
              ('created', 'created_on'),
              ('updated', 'updated_on'),
              'managed',
              'tags',
             )
    TABLE_COLUMNS = ('name', 'version', 'content_type', 'enabled')

class DeletedSecretModel(PresentationModel):
    '''
    azure.keyvault.secrets.DeletedSecret
    '''
    FIELDS = ('name',
              'id',
              'recovery_id',
              'deleted_date',
              'scheduled_purge_date',
              ('content_type', 'properties.content_type'),
              ('tags', 'properties.tags'),
             )
    TABLE_COLUMNS = ('name', 'deleted_date', 'scheduled_purge_date')

class CertificateModel(PresentationModel):
    '''
    azure.keyvault.certificates.KeyVaultCertificate
    '''
    FIELDS = ('name',
              ('version', 'properties.version'),
              'id',
              'key_id',
              'secret_id',
              ('thumbprint', 'properties.x509_thumbprint'),
              ('enabled', 'properties.enabled'),
              ('not_before', 'properties.not_before'),
              ('expires', 'properties.expires_on'),
              ('created', 'properties.created_on'),
              ('updated', 'properties.updated_on'),
              ('tags', 'properties.tags'),
             )
    TABLE_COLUMNS = ('name', 'version', 'enabled', 'expires')

class CertificatePropertiesModel(PresentationModel):
    '''
    azure.keyvault.certificates.CertificateProperties (list item)
    '''
    FIELDS = ('name',
              'version',
              'id',
              ('thumbprint', 'x509_thumbprint'),
              'enabled',
              'not_before',
              ('expires', 'expires_on'),
              ('created', 'created_on'),
              ('updated', 'updated_on'),
              'tags',
             )
    TABLE_COLUMNS = ('name', 'version', 'enabled', 'expires')

class DeletedCertificateModel(PresentationModel):
    '''
    azure.keyvault.certificates.DeletedCertificate
    '''
    FIELDS = ('name',
              'id',
              'recovery_id',
              'deleted_on',
              'scheduled_purge_date',
              ('thumbprint', 'properties.x509_thumbprint'),
              ('tags', 'properties.tags'),
             )
    TABLE_COLUMNS = ('name', 'deleted_on', 'scheduled_purge_date')

class CertificateOperationModel(PresentationModel):
    '''
    azure.keyvault.certificates.CertificateOperation
    '''
    FIELDS = ('name',
              'id',
              'issuer_name',
              'certificate_type',
              'csr',
              'cancellation_requested',
              'status',
              'status_details',
              ('error_code', 'error.code'),
              ('error_message', 'error.message'),
              'target_id',
              'request_id',
             )

class CertificatePolicyModel(PresentationModel):
    '''
    azure.keyvault.certificates.CertificatePolicy
    '''
    FIELDS = ('issuer_name',
              'subject',
              'san_dns_names',
              'san_emails',
              'san_user_principal_names',
              'key_type',
              'key_size',
              'key_curve_name',
              'exportable',
              'reuse_key',
              'content_type',
              'validity_in_months',
              'certificate_type',
              'certificate_transparency',
              'enabled',
              'created_on',
              'updated_on',
             )

class CertificateContactModel(PresentationModel):
    '''
    azure.keyvault.certificates.CertificateContact
    '''
    FIELDS = ('email',
              'name',
              'phone',
             )
    TABLE_COLUMNS = ('email', 'name', 'phone')

class CertificateIssuerModel(PresentationModel):
    '''
    azure.keyvault.certificates.CertificateIssuer and IssuerProperties
    '''
    FIELDS = ('name',
              'id',
              'provider',
              'account_id',
              'organization_id',
              'enabled',
              'created_on',
              'updated_on',
             )
    TABLE_COLUMNS = ('name', 'provider', 'enabled')

######################################################################
# helpers

def jwk_from_dict(data, exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Build azure.keyvault.keys.JsonWebKey from a JWK dict as
    described by RFC 7517. Byte members are base64url text.
    '''
    if not isinstance(data, dict):
        raise exc_value("key data must be a JSON object")
    kwargs = dict()
    for k, v in data.items():
        if k in JWK_BYTES_FIELDS:
            if not isinstance(v, str):
                raise exc_value("JWK member %r must be base64url text" % k)
            try:
                kwargs[k] = base64.urlsafe_b64decode(v + '=' * (-len(v) % 4))
            except ValueError as exc:
                raise exc_value("JWK member %r is not valid base64url: %r" % (k, exc)) from exc
        elif k in ('kid', 'kty', 'crv', 'key_ops'):
            kwargs[k] = v
        else:
            raise exc_value("unexpected JWK member %r" % k)
    if not kwargs.get('kty', None):
        raise exc_value("JWK member 'kty' not specified")
    return JsonWebKey(**kwargs)

def x509_certificates_from_bytes(data):
    '''
    data is the content of a certificate file. PEM content may
    hold several certificates. Return a list of DER bytes.
    '''
    if b'-----BEGIN CERTIFICATE-----' not in data:
        return [data]
    return [base64.b64decode(b''.join(x.split())) for x in PEM_CERT_RE.findall(data)]

######################################################################
# facade

class KeyVaultFacade(ServiceFacade):
    '''
    Data-plane operations against one vault.
    self.client is the KeyClient; the secret and certificate
    clients are kept alongside it.
    '''
    def __init__(self, vault_name, key_client, secret_client, certificate_client, logger, **kwargs):
        super().__init__(key_client, logger, **kwargs)
        self.vault_name = vault_name
        self.key_client = key_client
        self.secret_client = secret_client
        self.certificate_client = certificate_client

    def __repr__(self):
        return "<%s,%s,%r>" % (type(self).__name__, hex(id(self)), self.vault_name)

    def _name_check(self, name, desc='name'):
        '''
        Return name or raise if it is not a valid object name
        '''
        if not name:
            raise self.exc_value("'%s' not specified" % desc)
        if (not isinstance(name, str)) or (not RE_KEYVAULT_OBJECT_NAME_ABS.search(name)):
            raise self.exc_value("invalid %s %r" % (desc, name))
        return name

    def _version_check(self, version):
        '''
        None means the current version. Otherwise the version must be non-empty.
        '''
        if version is None:
            return None
        if (not isinstance(version, str)) or (not version.strip()):
            raise self.exc_value("'version' may not be empty")
        return version

    def _redact(self, name, value):
        '''
        Register a secret value for redaction
        '''
        if isinstance(value, str) and value:
            output_redact("%s/%s" % (self.vault_name, name), value)

    def _backup_write(self, name, data, output_file, force):
        '''
        Write backup bytes to output_file. An existing file is replaced only when forced.
        '''
        if not output_file:
            raise self.exc_value("'output_file' not specified")
        if os.path.exists(output_file) and (not force):
            raise self.exc_value("backup file %r already exists" % output_file)
        with open(output_file, 'wb') as f:
            f.write(data)
        self.logger.debug("%s wrote backup of %r to %r", self.mth(), name, output_file)
        return output_file

    def _backup_read(self, input_file):
        '''
        Return the bytes of a backup file
        '''
        if not input_file:
            raise self.exc_value("'input_file' not specified")
        try:
            with open(input_file, 'rb') as f:
                return f.read()
        except OSError as exc:
            raise self.exc_value("cannot read %r: %r" % (input_file, exc)) from exc

    ######################################################################
    # keys

    def key_create(self, name, key_type, size=None, curve=None, key_ops=None, enabled=None, not_before=None, expires=None, tags=None):
        '''
        Create a new key (or a new version of an existing key)
        '''
        self._name_check(name, desc='key name')
        kwargs = {'size' : size,
                  'curve' : curve,
                  'key_operations' : key_ops,
                  'enabled' : enabled,
                  'not_before' : not_before,
                  'expires_on' : expires,
                  'tags' : tags,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        ret = self._cw_call(self.key_client.create_key, name, key_type, **kwargs)
        return KeyModel.from_sdk(ret)

    def key_import(self, name, jwk, hardware_protected=None, enabled=None, not_before=None, expires=None, tags=None):
        '''
        Import jwk (azure.keyvault.keys.JsonWebKey).
        An HSM key may not be imported as a software-protected key.
        '''
        self._name_check(name, desc='key name')
        if (jwk.kty or '').upper().endswith('-HSM'):
            if hardware_protected is False:
                raise self.exc_value("cannot import an HSM key as a software-protected key")
            hardware_protected = True
        kwargs = {'hardware_protected' : hardware_protected,
                  'enabled' : enabled,
                  'not_before' : not_before,
                  'expires_on' : expires,
                  'tags' : tags,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        ret = self._cw_call(self.key_client.import_key, name, jwk, **kwargs)
        return KeyModel.from_sdk(ret)

    def key_update(self, name, version=None, key_ops=None, enabled=None, not_before=None, expires=None, tags=None):
        '''
        Update key attributes. Attributes that are None are left unchanged.
        '''
        self._name_check(name, desc='key name')
        version = self._version_check(version)
        kwargs = {'key_operations' : key_ops,
                  'enabled' : enabled,
                  'not_before' : not_before,
                  'expires_on' : expires,
                  'tags' : tags,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        ret = self._cw_call(self.key_client.update_key_properties, name, version=version, **kwargs)
        return KeyModel.from_sdk(ret)

    def key_get(self, name, version=None):
        '''
        Return KeyModel or None
        '''
        self._name_check(name, desc='key name')
        version = self._version_check(version)
        return KeyModel.from_sdk(self._cw_get(self.key_client.get_key, name, version=version))

    def _key_page(self, next_link=None):
        '''
        One page of keys
        '''
        return self._cw_page(self.key_client.list_properties_of_keys, next_link=next_link, transform=KeyPropertiesModel.from_sdk)

    def key_list(self, next_link=None, walk=True):
        '''
        List keys. See CallWrappers._pages().
        '''
        return self._pages(self._key_page, next_link=next_link, walk=walk)

    def _key_versions_page(self, name, next_link=None):
        '''
        One page of versions of the named key
        '''
        return self._cw_page(self.key_client.list_properties_of_key_versions, name, next_link=next_link, transform=KeyPropertiesModel.from_sdk)

    def key_versions_list(self, name, next_link=None, walk=True):
        '''
        List versions of the named key
        '''
        self._name_check(name, desc='key name')
        return self._pages(self._key_versions_page, name, next_link=next_link, walk=walk)

    def key_delete(self, name):
        '''
        Delete the named key and wait for the deletion to complete.
        Returns DeletedKeyModel.
        '''
        self._name_check(name, desc='key name')
        poller = self._cw_call(self.key_client.begin_delete_key, name)
        return DeletedKeyModel.from_sdk(self._cw_call(poller.result))

    def key_deleted_get(self, name):
        '''
        Return DeletedKeyModel or None
        '''
        self._name_check(name, desc='key name')
        return DeletedKeyModel.from_sdk(self._cw_get(self.key_client.get_deleted_key, name))

    def _key_deleted_page(self, next_link=None):
        '''
        One page of deleted keys
        '''
        return self._cw_page(self.key_client.list_deleted_keys, next_link=next_link, transform=DeletedKeyModel.from_sdk)

    def key_deleted_list(self, next_link=None, walk=True):
        '''
        List deleted keys
        '''
        return self._pages(self._key_deleted_page, next_link=next_link, walk=walk)

    def key_purge(self, name):
        '''
        Permanently delete a deleted key
        '''
        self._name_check(name, desc='key name')
        self._cw_call(self.key_client.purge_deleted_key, name)

    def key_recover(self, name):
        '''
        Recover a deleted key and wait for the recovery to complete
        '''
        self._name_check(name, desc='key name')
        poller = self._cw_call(self.key_client.begin_recover_deleted_key, name)
        return KeyModel.from_sdk(self._cw_call(poller.result))

    def key_backup(self, name, output_file, force=False):
        '''
        Write the key backup blob to output_file. Returns output_file.
        '''
        self._name_check(name, desc='key name')
        data = self._cw_call(self.key_client.backup_key, name)
        return self._backup_write(name, data, output_file, force)

    def key_restore(self, input_file):
        '''
        Restore a key from a backup file
        '''
        data = self._backup_read(input_file)
        return KeyModel.from_sdk(self._cw_call(self.key_client.restore_key_backup, data))

    ######################################################################
    # secrets

    def secret_set(self, name, value, content_type=None, enabled=None, not_before=None, expires=None, tags=None):
        '''
        Set the value of a secret. value is redacted from output.
        '''
        self._name_check(name, desc='secret name')
        if not isinstance(value, str):
            raise self.exc_value("secret value must be a string")
        self._redact(name, value)
        kwargs = {'content_type' : content_type,
                  'enabled' : enabled,
                  'not_before' : not_before,
                  'expires_on' : expires,
                  'tags' : tags,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        ret = self._cw_call(self.secret_client.set_secret, name, value, **kwargs)
        return SecretModel.from_sdk(ret)

    def secret_update(self, name, version=None, content_type=None, enabled=None, not_before=None, expires=None, tags=None):
        '''
        Update secret attributes. Attributes that are None are left unchanged.
        '''
        self._name_check(name, desc='secret name')
        version = self._version_check(version)
        kwargs = {'content_type' : content_type,
                  'enabled' : enabled,
                  'not_before' : not_before,
                  'expires_on' : expires,
                  'tags' : tags,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        ret = self._cw_call(self.secret_client.update_secret_properties, name, version=version, **kwargs)
        return SecretPropertiesModel.from_sdk(ret)

    def secret_get(self, name, version=None):
        '''
        Return SecretModel or None
        '''
        self._name_check(name, desc='secret name')
        version = self._version_check(version)
        ret = self._cw_get(self.secret_client.get_secret, name, version=version)
        if ret is not None:
            self._redact(name, ret.value)
        return SecretModel.from_sdk(ret)

    def _secret_page(self, next_link=None):
        '''
        One page of secrets
        '''
        return self._cw_page(self.secret_client.list_properties_of_secrets, next_link=next_link, transform=SecretPropertiesModel.from_sdk)

    def secret_list(self, next_link=None, walk=True):
        '''
        List secrets (without values)
        '''
        return self._pages(self._secret_page, next_link=next_link, walk=walk)

    def _secret_versions_page(self, name, next_link=None):
        '''
        One page of versions of the named secret
        '''
        return self._cw_page(self.secret_client.list_properties_of_secret_versions, name, next_link=next_link, transform=SecretPropertiesModel.from_sdk)

    def secret_versions_list(self, name, next_link=None, walk=True):
        '''
        List versions of the named secret
        '''
        self._name_check(name, desc='secret name')
        return self._pages(self._secret_versions_page, name, next_link=next_link, walk=walk)

    def secret_delete(self, name):
        '''
        Delete the named secret and wait for the deletion to complete
        '''
        self._name_check(name, desc='secret name')
        poller = self._cw_call(self.secret_client.begin_delete_secret, name)
        return DeletedSecretModel.from_sdk(self._cw_call(poller.result))

    def secret_deleted_get(self, name):
        '''
        Return DeletedSecretModel or None
        '''
        self._name_check(name, desc='secret name')
        return DeletedSecretModel.from_sdk(self._cw_get(self.secret_client.get_deleted_secret, name))

    def _secret_deleted_page(self, next_link=None):
        '''
        One page of deleted secrets
        '''
        return self._cw_page(self.secret_client.list_deleted_secrets, next_link=next_link, transform=DeletedSecretModel.from_sdk)

    def secret_deleted_list(self, next_link=None, walk=True):
        '''
        List deleted secrets
        '''
        return self._pages(self._secret_deleted_page, next_link=next_link, walk=walk)

    def secret_purge(self, name):
        '''
        Permanently delete a deleted secret
        '''
        self._name_check(name, desc='secret name')
        self._cw_call(self.secret_client.purge_deleted_secret, name)

    def secret_recover(self, name):
        '''
        Recover a deleted secret and wait for the recovery to complete
        '''
        self._name_check(name, desc='secret name')
        poller = self._cw_call(self.secret_client.begin_recover_deleted_secret, name)
        return SecretPropertiesModel.from_sdk(self._cw_call(poller.result))

    def secret_backup(self, name, output_file, force=False):
        '''
        Write the secret backup blob to output_file. Returns output_file.
        '''
        self._name_check(name, desc='secret name')
        data = self._cw_call(self.secret_client.backup_secret, name)
        return self._backup_write(name, data, output_file, force)

    def secret_restore(self, input_file):
        '''
        Restore a secret from a backup file
        '''
        data = self._backup_read(input_file)
        return SecretPropertiesModel.from_sdk(self._cw_call(self.secret_client.restore_secret_backup, data))

    ######################################################################
    # certificates

    def certificate_get(self, name, version=None):
        '''
        Return CertificateModel or None
        '''
        self._name_check(name, desc='certificate name')
        version = self._version_check(version)
        if version:
            ret = self._cw_get(self.certificate_client.get_certificate_version, name, version)
        else:
            ret = self._cw_get(self.certificate_client.get_certificate, name)
        return CertificateModel.from_sdk(ret)

    def _certificate_page(self, include_pending=None, next_link=None):
        '''
        One page of certificates
        '''
        kwargs = {'include_pending' : include_pending} if include_pending is not None else dict()
        return self._cw_page(self.certificate_client.list_properties_of_certificates, next_link=next_link, transform=CertificatePropertiesModel.from_sdk, **kwargs)

    def certificate_list(self, include_pending=None, next_link=None, walk=True):
        '''
        List certificates
        '''
        return self._pages(self._certificate_page, include_pending=include_pending, next_link=next_link, walk=walk)

    def _certificate_versions_page(self, name, next_link=None):
        '''
        One page of versions of the named certificate
        '''
        return self._cw_page(self.certificate_client.list_properties_of_certificate_versions, name, next_link=next_link, transform=CertificatePropertiesModel.from_sdk)

    def certificate_versions_list(self, name, next_link=None, walk=True):
        '''
        List versions of the named certificate
        '''
        self._name_check(name, desc='certificate name')
        return self._pages(self._certificate_versions_page, name, next_link=next_link, walk=walk)

    def _certificate_deleted_page(self, include_pending=None, next_link=None):
        '''
        One page of deleted certificates
        '''
        kwargs = {'include_pending' : include_pending} if include_pending is not None else dict()
        return self._cw_page(self.certificate_client.list_deleted_certificates, next_link=next_link, transform=DeletedCertificateModel.from_sdk, **kwargs)

    def certificate_deleted_list(self, include_pending=None, next_link=None, walk=True):
        '''
        List deleted certificates
        '''
        return self._pages(self._certificate_deleted_page, include_pending=include_pending, next_link=next_link, walk=walk)

    def certificate_import(self, name, data, password=None, policy=None, enabled=None, tags=None):
        '''
        Import a certificate. data is the content of a PFX or PEM file.
        PEM content gets a policy that says so unless a policy is given.
        '''
        self._name_check(name, desc='certificate name')
        if not data:
            raise self.exc_value("certificate content is empty")
        if password:
            self._redact(name+'/password', password)
        if (policy is None) and data.lstrip().startswith(b'-----BEGIN'):
            policy = CertificatePolicy(content_type=CertificateContentType.pem)
        kwargs = {'password' : password or None,
                  'policy' : policy,
                  'enabled' : enabled,
                  'tags' : tags,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        ret = self._cw_call(self.certificate_client.import_certificate, name, data, **kwargs)
        return CertificateModel.from_sdk(ret)

    def certificate_create(self, name, policy=None, enabled=None, tags=None):
        '''
        Begin creating a certificate and wait for the poller.
        The default policy is used when policy is None.
        Returns CertificateModel when the certificate is issued, or
        CertificateOperationModel when it is pending (eg unknown issuer).
        '''
        self._name_check(name, desc='certificate name')
        policy = policy or CertificatePolicy.get_default()
        kwargs = {'enabled' : enabled,
                  'tags' : tags,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        poller = self._cw_call(self.certificate_client.begin_create_certificate, name, policy, **kwargs)
        ret = self._cw_call(poller.result)
        if isinstance(ret, azure.keyvault.certificates.CertificateOperation):
            return CertificateOperationModel.from_sdk(ret)
        return CertificateModel.from_sdk(ret)

    def certificate_merge(self, name, x509_certificates, enabled=None, tags=None):
        '''
        Merge signed certificates (list of DER bytes) with a pending certificate request
        '''
        self._name_check(name, desc='certificate name')
        if not x509_certificates:
            raise self.exc_value("no certificates to merge")
        kwargs = {'enabled' : enabled,
                  'tags' : tags,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        ret = self._cw_call(self.certificate_client.merge_certificate, name, x509_certificates, **kwargs)
        return CertificateModel.from_sdk(ret)

    def certificate_update(self, name, version=None, enabled=None, tags=None):
        '''
        Update certificate attributes
        '''
        self._name_check(name, desc='certificate name')
        version = self._version_check(version)
        kwargs = {'enabled' : enabled,
                  'tags' : tags,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        ret = self._cw_call(self.certificate_client.update_certificate_properties, name, version=version, **kwargs)
        return CertificateModel.from_sdk(ret)

    def certificate_delete(self, name):
        '''
        Delete the named certificate and wait for the deletion to complete
        '''
        self._name_check(name, desc='certificate name')
        poller = self._cw_call(self.certificate_client.begin_delete_certificate, name)
        return DeletedCertificateModel.from_sdk(self._cw_call(poller.result))

    def certificate_deleted_get(self, name):
        '''
        Return DeletedCertificateModel or None
        '''
        self._name_check(name, desc='certificate name')
        return DeletedCertificateModel.from_sdk(self._cw_get(self.certificate_client.get_deleted_certificate, name))

    def certificate_purge(self, name):
        '''
        Permanently delete a deleted certificate
        '''
        self._name_check(name, desc='certificate name')
        self._cw_call(self.certificate_client.purge_deleted_certificate, name)

    def certificate_recover(self, name):
        '''
        Recover a deleted certificate and wait for the recovery to complete
        '''
        self._name_check(name, desc='certificate name')
        poller = self._cw_call(self.certificate_client.begin_recover_deleted_certificate, name)
        return CertificateModel.from_sdk(self._cw_call(poller.result))

    def certificate_backup(self, name, output_file, force=False):
        '''
        Write the certificate backup blob to output_file. Returns output_file.
        '''
        self._name_check(name, desc='certificate name')
        data = self._cw_call(self.certificate_client.backup_certificate, name)
        return self._backup_write(name, data, output_file, force)

    def certificate_restore(self, input_file):
        '''
        Restore a certificate from a backup file
        '''
        data = self._backup_read(input_file)
        return CertificateModel.from_sdk(self._cw_call(self.certificate_client.restore_certificate_backup, data))

    def certificate_operation_get(self, name):
        '''
        Return CertificateOperationModel or None
        '''
        self._name_check(name, desc='certificate name')
        return CertificateOperationModel.from_sdk(self._cw_get(self.certificate_client.get_certificate_operation, name))

    def certificate_operation_cancel(self, name):
        '''
        Request cancellation of the pending operation
        '''
        self._name_check(name, desc='certificate name')
        return CertificateOperationModel.from_sdk(self._cw_call(self.certificate_client.cancel_certificate_operation, name))

    def certificate_operation_delete(self, name):
        '''
        Delete the pending operation
        '''
        self._name_check(name, desc='certificate name')
        return CertificateOperationModel.from_sdk(self._cw_call(self.certificate_client.delete_certificate_operation, name))

    def certificate_policy_get(self, name):
        '''
        Return CertificatePolicyModel or None
        '''
        self._name_check(name, desc='certificate name')
        return CertificatePolicyModel.from_sdk(self._cw_get(self.certificate_client.get_certificate_policy, name))

    def certificate_policy_update(self, name, policy):
        '''
        Replace the policy of the named certificate
        '''
        self._name_check(name, desc='certificate name')
        if policy is None:
            raise self.exc_value("'policy' not specified")
        return CertificatePolicyModel.from_sdk(self._cw_call(self.certificate_client.update_certificate_policy, name, policy))

    ######################################################################
    # certificate contacts

    def contacts_get(self):
        '''
        Return a list of CertificateContactModel. No contacts is an empty list.
        '''
        ret = self._cw_get(self.certificate_client.get_contacts)
        return CertificateContactModel.from_sdk_list(ret or list())

    def contacts_set(self, contacts):
        '''
        Replace the contacts. contacts is a list of CertificateContact.
        '''
        ret = self._cw_call(self.certificate_client.set_contacts, contacts)
        return CertificateContactModel.from_sdk_list(ret or list())

    def contacts_delete(self):
        '''
        Delete all contacts
        '''
        ret = self._cw_call(self.certificate_client.delete_contacts)
        return CertificateContactModel.from_sdk_list(ret or list())

    ######################################################################
    # certificate issuers

    def issuer_get(self, name):
        '''
        Return CertificateIssuerModel or None
        '''
        self._name_check(name, desc='issuer name')
        return CertificateIssuerModel.from_sdk(self._cw_get(self.certificate_client.get_issuer, name))

    def _issuer_page(self, next_link=None):
        '''
        One page of issuers
        '''
        return self._cw_page(self.certificate_client.list_properties_of_issuers, next_link=next_link, transform=CertificateIssuerModel.from_sdk)

    def issuer_list(self, next_link=None, walk=True):
        '''
        List issuers
        '''
        return self._pages(self._issuer_page, next_link=next_link, walk=walk)

    def issuer_create(self, name, provider, account_id=None, password=None, organization_id=None, enabled=None):
        '''
        Create an issuer
        '''
        self._name_check(name, desc='issuer name')
        if not provider:
            raise self.exc_value("'provider' not specified")
        if password:
            self._redact(name+'/password', password)
        kwargs = {'account_id' : account_id,
                  'password' : password,
                  'organization_id' : organization_id,
                  'enabled' : enabled,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        return CertificateIssuerModel.from_sdk(self._cw_call(self.certificate_client.create_issuer, name, provider, **kwargs))

    def issuer_update(self, name, provider=None, account_id=None, password=None, organization_id=None, enabled=None):
        '''
        Update an issuer. Attributes that are None are left unchanged.
        '''
        self._name_check(name, desc='issuer name')
        if password:
            self._redact(name+'/password', password)
        kwargs = {'provider' : provider,
                  'account_id' : account_id,
                  'password' : password,
                  'organization_id' : organization_id,
                  'enabled' : enabled,
                 }
        kwargs = {k : v for k, v in kwargs.items() if v is not None}
        return CertificateIssuerModel.from_sdk(self._cw_call(self.certificate_client.update_issuer, name, **kwargs))

    def issuer_delete(self, name):
        '''
        Delete an issuer
        '''
        self._name_check(name, desc='issuer name')
        return CertificateIssuerModel.from_sdk(self._cw_call(self.certificate_client.delete_issuer, name))

######################################################################
# cmdlets

command = Command()

class Manager(ServiceManager):
    '''
    KeyVault cmdlets
    '''
    ACTION_ARGS = (('vault_name', {'help' : 'name of the vault'}),
                   ('name', {'help' : 'key, secret, certificate, or issuer name'}),
                   ('version', {'help' : 'object version'}),
                   ('include_versions', {'action' : 'store_true', 'help' : 'list all versions of the named object'}),
                   ('include_pending', {'action' : 'store_true', 'help' : 'include pending certificates'}),
                   ('in_removed_state', {'action' : 'store_true', 'help' : 'operate on deleted objects'}),
                   ('key_type', {'help' : 'key type (%s)' % ', '.join(KeyVaultKeyType.values(sort=False))}),
                   ('size', {'type' : int, 'help' : 'RSA key size'}),
                   ('curve', {'help' : 'EC curve name'}),
                   ('key_ops', {'help' : 'comma-separated key operations'}),
                   ('hardware_protected', {'help' : 'true to import as an HSM key'}),
                   ('enabled', {'help' : 'true or false'}),
                   ('not_before', {'help' : 'activation time'}),
                   ('expires', {'help' : 'expiration time'}),
                   ('tags', {'help' : 'tags as JSON or a path to a JSON file'}),
                   ('value', {'help' : 'secret value'}),
                   ('content_type', {'help' : 'secret content type'}),
                   ('file_path', {'help' : 'input or output file'}),
                   ('force', {'action' : 'store_true', 'help' : 'overwrite an existing output file'}),
                   ('password', {'help' : 'certificate or issuer password'}),
                   ('policy', {'help' : 'certificate policy as JSON or a path to a JSON file'}),
                   ('provider', {'help' : 'issuer provider'}),
                   ('account_id', {'help' : 'issuer account ID'}),
                   ('organization_id', {'help' : 'issuer organization ID'}),
                   ('email', {'help' : 'contact email address'}),
                   ('phone', {'help' : 'contact phone number'}),
                   ('contact_name', {'help' : 'contact name'}),
                  )

    def __init__(self, **kwargs):
        super().__init__(**kwargs)
        self._keyvault_facades = dict() # key=vault_name.lower() value=KeyVaultFacade

    ######################################################################
    # facade generation

    def vault_name_check(self, vault_name):
        '''
        Return vault_name or raise if it is missing or invalid
        '''
        if not vault_name:
            raise self.exc_value("'vault_name' not specified")
        if (not isinstance(vault_name, str)) or (not RE_KEYVAULT_VAULT_NAME_ABS.search(vault_name)):
            raise self.exc_value("invalid vault_name %r" % vault_name)
        return vault_name

    def keyvault_facade(self, vault_name):
        '''
        Return KeyVaultFacade for the named vault, generating it if necessary
        '''
        vault_name = self.vault_name_check(vault_name)
        with self._az_client_gen_lock:
            ret = self._keyvault_facades.get(vault_name.lower(), None)
            if ret is None:
                assert not self._AZ_CLIENT_GEN_MOUSETRAP
                ret = self._keyvault_facade_generate(vault_name)
                self._keyvault_facades[vault_name.lower()] = ret
            return ret

    def keyvault_facade_set(self, vault_name, facade):
        '''
        Place facade in the cache used by keyvault_facade()
        '''
        with self._az_client_gen_lock:
            self._keyvault_facades[vault_name.lower()] = facade

    def _keyvault_facade_generate(self, vault_name):
        '''
        Create data-plane clients for the named vault
        '''
        credential = self.azure_credential_generate()
        vault_url = azcmdlets.clouds.keyvault_url(vault_name, cloud=self.cloud)
        self.logger.debug("%s vault_url=%r", self.mth(), vault_url)
        return KeyVaultFacade(vault_name,
                              azure.keyvault.keys.KeyClient(vault_url=vault_url, credential=credential),
                              azure.keyvault.secrets.SecretClient(vault_url=vault_url, credential=credential),
                              azure.keyvault.certificates.CertificateClient(vault_url=vault_url, credential=credential),
                              self.logger,
                              exc_value=self.exc_value)

    ######################################################################
    # argument normalization

    def _policy_normalize(self, policy):
        '''
        Return CertificatePolicy or None. policy may already be
        CertificatePolicy, or a dict (or JSON/file) of its keyword arguments.
        '''
        if policy is None or policy == '':
            return None
        if isinstance(policy, CertificatePolicy):
            return policy
        data = json_or_file_load(policy, key='policy', exc_value=self.exc_value)
        if not isinstance(data, dict):
            raise self.exc_value("policy must be a JSON object")
        try:
            return CertificatePolicy(**data)
        except TypeError as exc:
            raise self.exc_value("invalid policy: %s" % exc) from exc

    def _common_attrs(self, enabled, not_before, expires, tags):
        '''
        Normalize the attributes shared by keys and secrets
        '''
        return {'enabled' : self.bool_optional(enabled, key='enabled'),
                'not_before' : datetime_normalize(not_before, key='not_before', exc_value=self.exc_value),
                'expires' : datetime_normalize(expires, key='expires', exc_value=self.exc_value),
                'tags' : self.tags_normalize(tags),
               }

    def _file_bytes(self, file_path):
        '''
        Return the content of file_path as bytes
        '''
        if not file_path:
            raise self.exc_value("'file_path' not specified")
        try:
            with open(file_path, 'rb') as f:
                return f.read()
        except OSError as exc:
            raise self.exc_value("cannot read %r: %r" % (file_path, exc)) from exc

    ######################################################################
    # keys

    KEY_GET_SETS = (ParameterSet('ByName', required=('vault_name', 'name'), optional=('version',)),
                    ParameterSet('ByKeyVersions', required=('vault_name', 'name', 'include_versions')),
                    ParameterSet('All', required=('vault_name',)),
                    ParameterSet('InRemovedState', required=('vault_name', 'in_removed_state'), optional=('name',)),
                   )

    @command.printable
    def key_get(self, vault_name=None, name=None, version=None, include_versions=None, in_removed_state=None):
        '''
        Get a key, the versions of a key, all keys, or deleted keys
        '''
        ps = self.parameter_set_select(self.KEY_GET_SETS,
                                       {'vault_name' : vault_name,
                                        'name' : name,
                                        'version' : version,
                                        'include_versions' : include_versions or None,
                                        'in_removed_state' : in_removed_state or None,
                                       },
                                       default='All')
        facade = self.keyvault_facade(vault_name)
        if ps.name == 'ByName':
            return facade.key_get(name, version=version)
        if ps.name == 'ByKeyVersions':
            return facade.key_versions_list(name)
        if ps.name == 'InRemovedState':
            if name:
                return facade.key_deleted_get(name)
            return facade.key_deleted_list()
        return facade.key_list()

    @command.printable_table
    def key_list_table(self, vault_name=None):
        '''
        List keys as a table
        '''
        return self.keyvault_facade(vault_name).key_list()

    @command.printable
    def key_add(self, vault_name=None, name=None, key_type=None, size=None, curve=None, key_ops=None, file_path=None, hardware_protected=None,
                enabled=None, not_before=None, expires=None, tags=None):
        '''
        Create a key, or import one from a JWK file when file_path is given
        '''
        facade = self.keyvault_facade(vault_name)
        attrs = self._common_attrs(enabled, not_before, expires, tags)
        if file_path:
            jwk = jwk_from_dict(json_or_file_load(file_path, key='file_path', exc_value=self.exc_value), exc_value=self.exc_value)
            return facade.key_import(name, jwk, hardware_protected=self.bool_optional(hardware_protected, key='hardware_protected'), **attrs)
        if not key_type:
            raise self.exc_value("'key_type' not specified")
        key_type = KeyVaultKeyType.coerce(key_type, exc_value=self.exc_value, prefix='key_type').value
        if size is not None:
            size = int(size)
        return facade.key_create(name, key_type, size=size, curve=curve or None, key_ops=stringlist_normalize(key_ops) or None, **attrs)

    @command.printable
    def key_update(self, vault_name=None, name=None, version=None, key_ops=None, enabled=None, not_before=None, expires=None, tags=None):
        '''
        Update key attributes
        '''
        facade = self.keyvault_facade(vault_name)
        attrs = self._common_attrs(enabled, not_before, expires, tags)
        return facade.key_update(name, version=version, key_ops=stringlist_normalize(key_ops) or None, **attrs)

    @command.printable
    def key_remove(self, vault_name=None, name=None, in_removed_state=None):
        '''
        Delete a key. With in_removed_state, purge a deleted key.
        '''
        facade = self.keyvault_facade(vault_name)
        if in_removed_state:
            facade.key_purge(name)
            return None
        return facade.key_delete(name)

    @command.printable
    def key_undo_removal(self, vault_name=None, name=None):
        '''
        Recover a deleted key
        '''
        return self.keyvault_facade(vault_name).key_recover(name)

    @command.printable
    def key_backup(self, vault_name=None, name=None, file_path=None, force=None):
        '''
        Back up a key to file_path
        '''
        return self.keyvault_facade(vault_name).key_backup(name, file_path, force=bool(force))

    @command.printable
    def key_restore(self, vault_name=None, file_path=None):
        '''
        Restore a key from file_path
        '''
        return self.keyvault_facade(vault_name).key_restore(file_path)

    ######################################################################
    # secrets

    SECRET_GET_SETS = (ParameterSet('ByName', required=('vault_name', 'name'), optional=('version',)),
                       ParameterSet('BySecretVersions', required=('vault_name', 'name', 'include_versions')),
                       ParameterSet('All', required=('vault_name',)),
                       ParameterSet('InRemovedState', required=('vault_name', 'in_removed_state'), optional=('name',)),
                      )

    @command.printable
    def secret_get(self, vault_name=None, name=None, version=None, include_versions=None, in_removed_state=None):
        '''
        Get a secret, the versions of a secret, all secrets, or deleted secrets
        '''
        ps = self.parameter_set_select(self.SECRET_GET_SETS,
                                       {'vault_name' : vault_name,
                                        'name' : name,
                                        'version' : version,
                                        'include_versions' : include_versions or None,
                                        'in_removed_state' : in_removed_state or None,
                                       },
                                       default='All')
        facade = self.keyvault_facade(vault_name)
        if ps.name == 'ByName':
            return facade.secret_get(name, version=version)
        if ps.name == 'BySecretVersions':
            return facade.secret_versions_list(name)
        if ps.name == 'InRemovedState':
            if name:
                return facade.secret_deleted_get(name)
            return facade.secret_deleted_list()
        return facade.secret_list()

    @command.printable
    def secret_set(self, vault_name=None, name=None, value=None, file_path=None, content_type=None, enabled=None, not_before=None, expires=None, tags=None):
        '''
        Set a secret from value or from the text of file_path
        '''
        facade = self.keyvault_facade(vault_name)
        if (value is not None) and file_path:
            raise self.exc_value("only one of value or file_path may be specified")
        if file_path:
            value = self._file_bytes(file_path).decode('utf-8')
        if value is None:
            raise self.exc_value("'value' not specified")
        attrs = self._common_attrs(enabled, not_before, expires, tags)
        return facade.secret_set(name, value, content_type=content_type or None, **attrs)

    @command.printable
    def secret_update(self, vault_name=None, name=None, version=None, content_type=None, enabled=None, not_before=None, expires=None, tags=None):
        '''
        Update secret attributes
        '''
        facade = self.keyvault_facade(vault_name)
        attrs = self._common_attrs(enabled, not_before, expires, tags)
        return facade.secret_update(name, version=version, content_type=content_type or None, **attrs)

    @command.printable
    def secret_remove(self, vault_name=None, name=None, in_removed_state=None):
        '''
        Delete a secret. With in_removed_state, purge a deleted secret.
        '''
        facade = self.keyvault_facade(vault_name)
        if in_removed_state:
            facade.secret_purge(name)
            return None
        return facade.secret_delete(name)

    @command.printable
    def secret_undo_removal(self, vault_name=None, name=None):
        '''
        Recover a deleted secret
        '''
        return self.keyvault_facade(vault_name).secret_recover(name)

    @command.printable
    def secret_backup(self, vault_name=None, name=None, file_path=None, force=None):
        '''
        Back up a secret to file_path
        '''
        return self.keyvault_facade(vault_name).secret_backup(name, file_path, force=bool(force))

    @command.printable
    def secret_restore(self, vault_name=None, file_path=None):
        '''
        Restore a secret from file_path
        '''
        return self.keyvault_facade(vault_name).secret_restore(file_path)

    ######################################################################
    # certificates

    CERTIFICATE_GET_SETS = (ParameterSet('ByName', required=('vault_name', 'name'), optional=('version',)),
                            ParameterSet('ByCertificateVersions', required=('vault_name', 'name', 'include_versions')),
                            ParameterSet('All', required=('vault_name',), optional=('include_pending',)),
                            ParameterSet('InRemovedState', required=('vault_name', 'in_removed_state'), optional=('name', 'include_pending')),
                           )

    @command.printable
    def certificate_get(self, vault_name=None, name=None, version=None, include_versions=None, include_pending=None, in_removed_state=None):
        '''
        Get a certificate, the versions of a certificate, all certificates, or deleted certificates
        '''
        ps = self.parameter_set_select(self.CERTIFICATE_GET_SETS,
                                       {'vault_name' : vault_name,
                                        'name' : name,
                                        'version' : version,
                                        'include_versions' : include_versions or None,
                                        'include_pending' : include_pending or None,
                                        'in_removed_state' : in_removed_state or None,
                                       },
                                       default='All')
        facade = self.keyvault_facade(vault_name)
        if ps.name == 'ByName':
            return facade.certificate_get(name, version=version)
        if ps.name == 'ByCertificateVersions':
            return facade.certificate_versions_list(name)
        if ps.name == 'InRemovedState':
            if name:
                return facade.certificate_deleted_get(name)
            return facade.certificate_deleted_list(include_pending=include_pending or None)
        return facade.certificate_list(include_pending=include_pending or None)

    @command.printable
    def certificate_import(self, vault_name=None, name=None, file_path=None, password=None, policy=None, enabled=None, tags=None):
        '''
        Import a certificate from a PFX or PEM file
        '''
        facade = self.keyvault_facade(vault_name)
        data = self._file_bytes(file_path)
        return facade.certificate_import(name, data,
                                         password=password or None,
                                         policy=self._policy_normalize(policy),
                                         enabled=self.bool_optional(enabled, key='enabled'),
                                         tags=self.tags_normalize(tags))

    @command.printable
    def certificate_add(self, vault_name=None, name=None, policy=None, enabled=None, tags=None):
        '''
        Create a certificate
        '''
        facade = self.keyvault_facade(vault_name)
        return facade.certificate_create(name,
                                         policy=self._policy_normalize(policy),
                                         enabled=self.bool_optional(enabled, key='enabled'),
                                         tags=self.tags_normalize(tags))

    @command.printable
    def certificate_merge(self, vault_name=None, name=None, file_path=None, enabled=None, tags=None):
        '''
        Merge the signed certificate(s) in file_path with a pending request
        '''
        facade = self.keyvault_facade(vault_name)
        certs = x509_certificates_from_bytes(self._file_bytes(file_path))
        return facade.certificate_merge(name, certs,
                                        enabled=self.bool_optional(enabled, key='enabled'),
                                        tags=self.tags_normalize(tags))

    @command.printable
    def certificate_update(self, vault_name=None, name=None, version=None, enabled=None, tags=None):
        '''
        Update certificate attributes
        '''
        return self.keyvault_facade(vault_name).certificate_update(name,
                                                                   version=version,
                                                                   enabled=self.bool_optional(enabled, key='enabled'),
                                                                   tags=self.tags_normalize(tags))

    @command.printable
    def certificate_remove(self, vault_name=None, name=None, in_removed_state=None):
        '''
        Delete a certificate. With in_removed_state, purge a deleted certificate.
        '''
        facade = self.keyvault_facade(vault_name)
        if in_removed_state:
            facade.certificate_purge(name)
            return None
        return facade.certificate_delete(name)

    @command.printable
    def certificate_undo_removal(self, vault_name=None, name=None):
        '''
        Recover a deleted certificate
        '''
        return self.keyvault_facade(vault_name).certificate_recover(name)

    @command.printable
    def certificate_backup(self, vault_name=None, name=None, file_path=None, force=None):
        '''
        Back up a certificate to file_path
        '''
        return self.keyvault_facade(vault_name).certificate_backup(name, file_path, force=bool(force))

    @command.printable
    def certificate_restore(self, vault_name=None, file_path=None):
        '''
        Restore a certificate from file_path
        '''
        return self.keyvault_facade(vault_name).certificate_restore(file_path)

    @command.printable
    def certificate_operation_get(self, vault_name=None, name=None):
        '''
        Get the pending operation for a certificate
        '''
        return self.keyvault_facade(vault_name).certificate_operation_get(name)

    @command.printable
    def certificate_operation_stop(self, vault_name=None, name=None):
        '''
        Cancel the pending operation for a certificate
        '''
        return self.keyvault_facade(vault_name).certificate_operation_cancel(name)

    @command.printable
    def certificate_operation_remove(self, vault_name=None, name=None):
        '''
        Delete the pending operation for a certificate
        '''
        return self.keyvault_facade(vault_name).certificate_operation_delete(name)

    @command.printable
    def certificate_policy_get(self, vault_name=None, name=None):
        '''
        Get the policy of a certificate
        '''
        return self.keyvault_facade(vault_name).certificate_policy_get(name)

    @command.printable
    def certificate_policy_set(self, vault_name=None, name=None, policy=None):
        '''
        Replace the policy of a certificate
        '''
        return self.keyvault_facade(vault_name).certificate_policy_update(name, self._policy_normalize(policy))

    ######################################################################
    # certificate contacts

    @command.printable
    def certificate_contact_get(self, vault_name=None):
        '''
        Get certificate contacts
        '''
        return self.keyvault_facade(vault_name).contacts_get()

    @command.printable
    def certificate_contact_add(self, vault_name=None, email=None, contact_name=None, phone=None):
        '''
        Add a contact to the existing contacts. An existing contact
        with the same email address is replaced.
        '''
        if not email:
            raise self.exc_value("'email' not specified")
        facade = self.keyvault_facade(vault_name)
        contacts = [x.sdk for x in facade.contacts_get() if (x.email or '').lower() != email.lower()]
        contacts.append(CertificateContact(email=email, name=contact_name or None, phone=phone or None))
        return facade.contacts_set(contacts)

    @command.printable
    def certificate_contact_remove(self, vault_name=None, email=None):
        '''
        Remove a contact. Removing the last contact deletes the contact list.
        '''
        if not email:
            raise self.exc_value("'email' not specified")
        facade = self.keyvault_facade(vault_name)
        existing = facade.contacts_get()
        contacts = [x.sdk for x in existing if (x.email or '').lower() != email.lower()]
        if len(contacts) == len(existing):
            raise self.exc_value("contact %r not found" % email)
        if not contacts:
            return facade.contacts_delete()
        return facade.contacts_set(contacts)

    ######################################################################
    # certificate issuers

    @command.printable
    def certificate_issuer_get(self, vault_name=None, name=None):
        '''
        Get one issuer or list all issuers
        '''
        facade = self.keyvault_facade(vault_name)
        if name:
            return facade.issuer_get(name)
        return facade.issuer_list()

    @command.printable
    def certificate_issuer_set(self, vault_name=None, name=None, provider=None, account_id=None, password=None, organization_id=None, enabled=None):
        '''
        Create the named issuer, or update it if it exists
        '''
        facade = self.keyvault_facade(vault_name)
        enabled = self.bool_optional(enabled, key='enabled')
        if facade.issuer_get(name):
            return facade.issuer_update(name, provider=provider or None, account_id=account_id or None, password=password or None,
                                        organization_id=organization_id or None, enabled=enabled)
        return facade.issuer_create(name, provider, account_id=account_id or None, password=password or None,
                                    organization_id=organization_id or None, enabled=enabled)

    @command.printable
    def certificate_issuer_remove(self, vault_name=None, name=None):
        '''
        Delete an issuer
        '''
        return self.keyvault_facade(vault_name).issuer_delete(name)

Manager.command = command

Manager.main(__name__)
