#!/usr/bin/env python3
#
# azcmdlets/recoveryservices.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Recovery services vault cmdlets
'''
from azure.mgmt.recoveryservices import RecoveryServicesClient
from azure.mgmt.resource import ResourceManagementClient

from azcmdlets.azresourceid import resource_group_from_id
from azcmdlets.cmdlet import (PresentationModel,
                              ServiceFacade,
                              ServiceManager,
                             )
from azcmdlets.command import Command
from azcmdlets.msapicall import AZURE_SDK_EXCEPTIONS

class VaultModel(PresentationModel):
    '''
    azure.mgmt.recoveryservices.models.Vault
    '''
    FIELDS = ('name',
              'id',
              'type',
              'location',
              'resource_group_name',
              ('sku', 'sku.name'),
              ('provisioning_state', 'properties.provisioning_state'),
              'tags',
             )
    TABLE_COLUMNS = ('name', 'resource_group_name', 'location')

    @classmethod
    def from_sdk(cls, obj):
        ret = super().from_sdk(obj)
        if ret is not None:
            ret.resource_group_name = resource_group_from_id(ret.id)
        return ret

class RecoveryServicesFacade(ServiceFacade):
    '''
    self.client is azure.mgmt.recoveryservices.RecoveryServicesClient
    '''
    def vault_get(self, resource_group, name):
        '''
        Return VaultModel or None
        '''
        return VaultModel.from_sdk(self._cw_get(self.client.vaults.get, resource_group, name))

    def _vault_page(self, resource_group, next_link=None):
        '''
        One page of vaults in a resource group
        '''
        return self._cw_page(self.client.vaults.list_by_resource_group, resource_group, next_link=next_link, transform=VaultModel.from_sdk)

    def vault_list(self, resource_group, next_link=None, walk=True):
        '''
        List vaults in a resource group
        '''
        return self._pages(self._vault_page, resource_group, next_link=next_link, walk=walk)

command = Command()

class Manager(ServiceManager):
    '''
    Recovery services cmdlets
    '''
    ACTION_ARGS = (('name', {'help' : 'vault name'}),
                  )

    def recoveryservices_facade(self):
        '''
        Return RecoveryServicesFacade
        '''
        client = self._az_client_gen_property('recoveryservices', RecoveryServicesClient)
        return RecoveryServicesFacade(client, self.logger, exc_value=self.exc_value)

    def resource_group_names(self):
        '''
        Return the names of all resource groups in the subscription
        '''
        client = self._az_client_gen_property('resource', ResourceManagementClient)
        return [x.name for x in self._cw_list(client.resource_groups.list)]

    @command.printable
    def vault_get(self, name=None):
        '''
        List vaults in --resource_group, or in every resource group
        of the subscription, optionally only those named name.
        '''
        facade = self.recoveryservices_facade()
        if self.resource_group and name:
            vault = facade.vault_get(self.resource_group, name)
            return [vault] if vault else list()
        if self.resource_group:
            vaults = facade.vault_list(self.resource_group)
        else:
            vaults = list()
            for resource_group in self.resource_group_names():
                try:
                    vaults.extend(facade.vault_list(resource_group))
                except AZURE_SDK_EXCEPTIONS as exc:
                    self.logger.debug("%s ignoring resource group %s: %r", self.mth(), resource_group, exc)
        if name:
            vaults = [x for x in vaults if (x.name or '').lower() == name.lower()]
        return vaults

Manager.command = command

Manager.main(__name__)
