#!/usr/bin/env python3
#
# azcmdlets/network.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Network cmdlets: network interfaces, public IP addresses,
network security groups, and security rules.

Security rule config operations (new/add/set/remove/get) work on an
in-memory network security group. The cmdlets that change rules fetch
the group, change it, and write it back with nsg_set semantics.
'''
from azure.mgmt.network import NetworkManagementClient
from azure.mgmt.network.models import (ApplicationSecurityGroup,
                                       SecurityRule,
                                      )

import azcmdlets.base_defaults
from azcmdlets.azresourceid import (AzResourceId,
                                    AzSubResourceId,
                                    azresourceid_from_text,
                                    resource_group_from_id,
                                   )
from azcmdlets.btypes import (NsgRuleAccess,
                              NsgRuleDirection,
                              NsgRuleProtocol,
                             )
from azcmdlets.cmdlet import (PresentationModel,
                              ServiceFacade,
                              ServiceManager,
                             )
from azcmdlets.command import Command
from azcmdlets.parametersets import ParameterSet
from azcmdlets.util import (json_or_file_load,
                            stringlist_normalize,
                           )

NETWORK_PROVIDER = 'Microsoft.Network'

######################################################################
# presentation models

class NetworkInterfaceModel(PresentationModel):
    '''
    azure.mgmt.network.models.NetworkInterface
    '''
    FIELDS = ('name',
              'id',
              'resource_group_name',
              'location',
              'mac_address',
              'primary',
              'enable_accelerated_networking',
              'enable_ip_forwarding',
              'provisioning_state',
              ('network_security_group_id', 'network_security_group.id'),
              ('virtual_machine_id', 'virtual_machine.id'),
              'private_ip_addresses',
              'tags',
             )
    TABLE_COLUMNS = ('name', 'resource_group_name', 'location', 'private_ip_addresses')

    @classmethod
    def from_sdk(cls, obj):
        ret = super().from_sdk(obj)
        if ret is not None:
            ret.resource_group_name = resource_group_from_id(ret.id)
            ret.private_ip_addresses = [x.private_ip_address for x in (obj.ip_configurations or list()) if getattr(x, 'private_ip_address', None)]
        return ret

class PublicIpAddressModel(PresentationModel):
    '''
    azure.mgmt.network.models.PublicIPAddress
    '''
    FIELDS = ('name',
              'id',
              'location',
              'ip_address',
              'public_ip_allocation_method',
              'public_ip_address_version',
              'idle_timeout_in_minutes',
              ('sku', 'sku.name'),
              ('fqdn', 'dns_settings.fqdn'),
              ('ip_configuration_id', 'ip_configuration.id'),
              'provisioning_state',
              'tags',
             )
    TABLE_COLUMNS = ('name', 'location', 'ip_address', 'public_ip_allocation_method')

class SecurityRuleModel(PresentationModel):
    '''
    azure.mgmt.network.models.SecurityRule
    The single and plural forms of ports and prefixes are
    presented together as lists.
    '''
    FIELDS = ('name',
              'id',
              'description',
              'protocol',
              'source_port_range',
              'destination_port_range',
              'source_address_prefix',
              'destination_address_prefix',
              'source_application_security_group_ids',
              'destination_application_security_group_ids',
              'access',
              'priority',
              'direction',
              'provisioning_state',
             )
    TABLE_COLUMNS = ('name', 'priority', 'direction', 'access', 'protocol')

    @classmethod
    def from_sdk(cls, obj):
        ret = super().from_sdk(obj)
        if ret is not None:
            ret.source_port_range = rule_values_get(obj, 'source_port_range')
            ret.destination_port_range = rule_values_get(obj, 'destination_port_range')
            ret.source_address_prefix = rule_values_get(obj, 'source_address_prefix')
            ret.destination_address_prefix = rule_values_get(obj, 'destination_address_prefix')
            ret.source_application_security_group_ids = [x.id for x in (obj.source_application_security_groups or list())]
            ret.destination_application_security_group_ids = [x.id for x in (obj.destination_application_security_groups or list())]
        return ret

class NetworkSecurityGroupModel(PresentationModel):
    '''
    azure.mgmt.network.models.NetworkSecurityGroup
    '''
    FIELDS = ('name',
              'id',
              'location',
              'resource_group_name',
              'security_rules',
              'default_security_rules',
              'provisioning_state',
              'tags',
             )
    TABLE_COLUMNS = ('name', 'resource_group_name', 'location')

    @classmethod
    def from_sdk(cls, obj):
        ret = super().from_sdk(obj)
        if ret is not None:
            ret.resource_group_name = resource_group_from_id(ret.id)
            ret.security_rules = SecurityRuleModel.from_sdk_list(obj.security_rules or list())
            ret.default_security_rules = SecurityRuleModel.from_sdk_list(obj.default_security_rules or list())
        return ret

######################################################################
# security rules

def rule_values_get(rule, singular):
    '''
    Return the values of a rule attribute that has singular
    and plural forms (source_port_range/source_port_ranges) as a list
    '''
    ret = list(getattr(rule, singular + 's', None) or list())
    one = getattr(rule, singular, None)
    if one and (one not in ret):
        ret.insert(0, one)
    return ret

def rule_values_set(rule, singular, values):
    '''
    Set the singular form for one value, the plural form otherwise
    '''
    if len(values) == 1:
        setattr(rule, singular, values[0])
        setattr(rule, singular + 's', None)
    else:
        setattr(rule, singular, None)
        setattr(rule, singular + 's', list(values) or None)

def security_rule_find(nsg, name):
    '''
    Return the rule in the SDK NetworkSecurityGroup nsg named
    name (case-insensitive) or None
    '''
    for rule in (nsg.security_rules or list()):
        if (rule.name or '').lower() == name.lower():
            return rule
    return None

def security_rule_update(rule,
                         description=None,
                         protocol=None,
                         source_port_range=None,
                         destination_port_range=None,
                         source_address_prefix=None,
                         destination_address_prefix=None,
                         source_application_security_group_id=None,
                         destination_application_security_group_id=None,
                         access=None,
                         priority=None,
                         direction=None,
                         exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Apply the given values to the SDK SecurityRule rule and validate.
    Values that are None are left unchanged. Returns rule.
    '''
    if description is not None:
        rule.description = description
    if protocol is not None:
        rule.protocol = NsgRuleProtocol.coerce(protocol, exc_value=exc_value, prefix='protocol').value
    if access is not None:
        rule.access = NsgRuleAccess.coerce(access, exc_value=exc_value, prefix='access').value
    if direction is not None:
        rule.direction = NsgRuleDirection.coerce(direction, exc_value=exc_value, prefix='direction').value
    if priority is not None:
        try:
            priority = int(priority)
        except (TypeError, ValueError) as exc:
            raise exc_value("invalid priority %r" % priority) from exc
        if not azcmdlets.base_defaults.NSG_RULE_PRIORITY_MIN <= priority <= azcmdlets.base_defaults.NSG_RULE_PRIORITY_MAX:
            raise exc_value("priority %d is not in the range %d..%d" % (priority, azcmdlets.base_defaults.NSG_RULE_PRIORITY_MIN, azcmdlets.base_defaults.NSG_RULE_PRIORITY_MAX))
        rule.priority = priority

    src_prefixes = stringlist_normalize(source_address_prefix)
    dst_prefixes = stringlist_normalize(destination_address_prefix)
    src_asgs = stringlist_normalize(source_application_security_group_id)
    dst_asgs = stringlist_normalize(destination_application_security_group_id)
    if src_prefixes and src_asgs:
        raise exc_value("source_address_prefix and source_application_security_group_id cannot be used simultaneously.")
    if dst_prefixes and dst_asgs:
        raise exc_value("destination_address_prefix and destination_application_security_group_id cannot be used simultaneously.")
    if source_port_range is not None:
        rule_values_set(rule, 'source_port_range', stringlist_normalize(source_port_range))
    if destination_port_range is not None:
        rule_values_set(rule, 'destination_port_range', stringlist_normalize(destination_port_range))
    if src_prefixes:
        rule_values_set(rule, 'source_address_prefix', src_prefixes)
        rule.source_application_security_groups = None
    if dst_prefixes:
        rule_values_set(rule, 'destination_address_prefix', dst_prefixes)
        rule.destination_application_security_groups = None
    if src_asgs:
        rule_values_set(rule, 'source_address_prefix', list())
        rule.source_application_security_groups = [ApplicationSecurityGroup(id=x) for x in src_asgs]
    if dst_asgs:
        rule_values_set(rule, 'destination_address_prefix', list())
        rule.destination_application_security_groups = [ApplicationSecurityGroup(id=x) for x in dst_asgs]

    for attr in ('protocol', 'access', 'direction', 'priority'):
        if getattr(rule, attr, None) is None:
            raise exc_value("security rule %r: %r not specified" % (rule.name, attr))
    return rule

def security_rule_new(name, exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT, **kwargs):
    '''
    Build a new SDK SecurityRule. Nothing is sent to Azure.
    kwargs are as for security_rule_update().
    '''
    if not name:
        raise exc_value("security rule name not specified")
    rule = SecurityRule(name=name)
    return security_rule_update(rule, exc_value=exc_value, **kwargs)

######################################################################
# facade

class NetworkFacade(ServiceFacade):
    '''
    self.client is azure.mgmt.network.NetworkManagementClient
    '''

    ######################################################################
    # network interfaces

    def nic_get(self, resource_group, name, expand=None):
        '''
        Return NetworkInterfaceModel or None
        '''
        return NetworkInterfaceModel.from_sdk(self._cw_get(self.client.network_interfaces.get, resource_group, name, expand=expand))

    def scale_set_nic_get(self, resource_group, vmss_name, vm_index, name, expand=None):
        '''
        Return NetworkInterfaceModel or None for a scale set VM NIC
        '''
        return NetworkInterfaceModel.from_sdk(self._cw_get(self.client.network_interfaces.get_virtual_machine_scale_set_network_interface,
                                                           resource_group, vmss_name, vm_index, name, expand=expand))

    def _nic_page(self, resource_group=None, vmss_name=None, vm_index=None, next_link=None):
        '''
        One page of NICs. The scope is the scale set VM, the scale set,
        the resource group, or the subscription, depending on what is given.
        '''
        ops = self.client.network_interfaces
        kwargs = {'next_link' : next_link, 'transform' : NetworkInterfaceModel.from_sdk}
        if resource_group and vmss_name:
            if vm_index is not None:
                return self._cw_page(ops.list_virtual_machine_scale_set_vm_network_interfaces, resource_group, vmss_name, vm_index, **kwargs)
            return self._cw_page(ops.list_virtual_machine_scale_set_network_interfaces, resource_group, vmss_name, **kwargs)
        if resource_group:
            return self._cw_page(ops.list, resource_group, **kwargs)
        return self._cw_page(ops.list_all, **kwargs)

    def nic_list(self, resource_group=None, vmss_name=None, vm_index=None, next_link=None, walk=True):
        '''
        List NICs
        '''
        return self._pages(self._nic_page, resource_group=resource_group, vmss_name=vmss_name, vm_index=vm_index, next_link=next_link, walk=walk)

    ######################################################################
    # public IP addresses

    def public_ip_get(self, resource_group, name, expand=None):
        '''
        Return PublicIpAddressModel or None
        '''
        return PublicIpAddressModel.from_sdk(self._cw_get(self.client.public_ip_addresses.get, resource_group, name, expand=expand))

    def _public_ip_page(self, resource_group=None, next_link=None):
        '''
        One page of public IP addresses
        '''
        if resource_group:
            return self._cw_page(self.client.public_ip_addresses.list, resource_group, next_link=next_link, transform=PublicIpAddressModel.from_sdk)
        return self._cw_page(self.client.public_ip_addresses.list_all, next_link=next_link, transform=PublicIpAddressModel.from_sdk)

    def public_ip_list(self, resource_group=None, next_link=None, walk=True):
        '''
        List public IP addresses in the resource group or subscription
        '''
        return self._pages(self._public_ip_page, resource_group=resource_group, next_link=next_link, walk=walk)

    ######################################################################
    # network security groups

    def nsg_get(self, resource_group, name):
        '''
        Return NetworkSecurityGroupModel or None
        '''
        return NetworkSecurityGroupModel.from_sdk(self._cw_get(self.client.network_security_groups.get, resource_group, name))

    def _nsg_page(self, resource_group=None, next_link=None):
        '''
        One page of network security groups
        '''
        if resource_group:
            return self._cw_page(self.client.network_security_groups.list, resource_group, next_link=next_link, transform=NetworkSecurityGroupModel.from_sdk)
        return self._cw_page(self.client.network_security_groups.list_all, next_link=next_link, transform=NetworkSecurityGroupModel.from_sdk)

    def nsg_list(self, resource_group=None, next_link=None, walk=True):
        '''
        List network security groups
        '''
        return self._pages(self._nsg_page, resource_group=resource_group, next_link=next_link, walk=walk)

    def nsg_write(self, resource_group, name, nsg):
        '''
        Write the SDK NetworkSecurityGroup nsg and wait for completion.
        Returns the group as read back after the write.
        '''
        poller = self._cw_call(self.client.network_security_groups.begin_create_or_update, resource_group, name, nsg)
        self._cw_call(poller.result)
        return self.nsg_get(resource_group, name)

######################################################################
# cmdlets

command = Command()

class Manager(ServiceManager):
    '''
    Network cmdlets. The resource group comes from --resource_group.
    '''
    ACTION_ARGS = (('name', {'help' : 'resource name'}),
                   ('resource_id', {'help' : 'resource ID'}),
                   ('expand_resource', {'help' : 'resource reference to expand'}),
                   ('virtual_machine_scale_set_name', {'help' : 'scale set name'}),
                   ('virtual_machine_index', {'help' : 'scale set VM index'}),
                   ('nsg_name', {'help' : 'network security group name'}),
                   ('tags', {'help' : 'tags as JSON or a path to a JSON file'}),
                   ('description', {'help' : 'security rule description'}),
                   ('protocol', {'help' : 'security rule protocol (%s)' % ', '.join(NsgRuleProtocol.values(sort=False))}),
                   ('source_port_range', {'help' : 'comma-separated source ports or ranges'}),
                   ('destination_port_range', {'help' : 'comma-separated destination ports or ranges'}),
                   ('source_address_prefix', {'help' : 'comma-separated source prefixes'}),
                   ('destination_address_prefix', {'help' : 'comma-separated destination prefixes'}),
                   ('source_application_security_group_id', {'help' : 'comma-separated source application security group IDs'}),
                   ('destination_application_security_group_id', {'help' : 'comma-separated destination application security group IDs'}),
                   ('access', {'help' : 'security rule access (%s)' % ', '.join(NsgRuleAccess.values(sort=False))}),
                   ('priority', {'type' : int, 'help' : 'security rule priority (%d..%d)' % (azcmdlets.base_defaults.NSG_RULE_PRIORITY_MIN, azcmdlets.base_defaults.NSG_RULE_PRIORITY_MAX)}),
                   ('direction', {'help' : 'security rule direction (%s)' % ', '.join(NsgRuleDirection.values(sort=False))}),
                  )

    def network_facade(self, subscription_id=None):
        '''
        Return NetworkFacade
        '''
        client = self._az_client_gen_property('network', NetworkManagementClient, subscription_id=subscription_id)
        return NetworkFacade(client, self.logger, exc_value=self.exc_value)

    ######################################################################
    # network interfaces

    NIC_GET_SETS = (ParameterSet('NoExpandStandAloneNic', optional=('resource_group', 'name')),
                    ParameterSet('ExpandStandAloneNic', required=('resource_group', 'name', 'expand_resource')),
                    ParameterSet('NoExpandScaleSetNic', required=('resource_group', 'virtual_machine_scale_set_name'), optional=('virtual_machine_index', 'name')),
                    ParameterSet('ExpandScaleSetNic', required=('resource_group', 'virtual_machine_scale_set_name', 'virtual_machine_index', 'name', 'expand_resource')),
                    ParameterSet('GetByResourceIdNoExpandParameterSet', required=('resource_id',), optional=('resource_group',)),
                   )

    @command.printable
    def nic_get(self, name=None, resource_id=None, expand_resource=None, virtual_machine_scale_set_name=None, virtual_machine_index=None):
        '''
        Get one network interface, or list network interfaces
        '''
        ps = self.parameter_set_select(self.NIC_GET_SETS,
                                       {'resource_group' : self.resource_group,
                                        'name' : name,
                                        'resource_id' : resource_id,
                                        'expand_resource' : expand_resource,
                                        'virtual_machine_scale_set_name' : virtual_machine_scale_set_name,
                                        'virtual_machine_index' : virtual_machine_index,
                                       },
                                       default='NoExpandStandAloneNic')
        if ps.name == 'GetByResourceIdNoExpandParameterSet':
            azrid = azresourceid_from_text(resource_id, exc_desc='network interface ID', exc_value=self.exc_value)
            if isinstance(azrid, AzSubResourceId):
                raise self.exc_value("%r is not a network interface ID" % resource_id)
            if (not isinstance(azrid, AzResourceId)) or (azrid.provider_name.lower() != NETWORK_PROVIDER.lower()) or (azrid.resource_type.lower() != 'networkinterfaces'):
                raise self.exc_value("%r is not a network interface ID" % resource_id)
            return self.network_facade(subscription_id=azrid.subscription_id).nic_get(azrid.resource_group_name, azrid.resource_name)
        facade = self.network_facade()
        scale_set = ps.name.endswith('ScaleSetNic')
        if name:
            if scale_set:
                if virtual_machine_index is None:
                    raise self.exc_value("'virtual_machine_index' is required to get a scale set network interface by name")
                return facade.scale_set_nic_get(self.resource_group, virtual_machine_scale_set_name, virtual_machine_index, name, expand=expand_resource)
            if not self.resource_group:
                raise self.exc_value("'resource_group' is required to get a network interface by name")
            return facade.nic_get(self.resource_group, name, expand=expand_resource)
        if scale_set:
            return facade.nic_list(resource_group=self.resource_group, vmss_name=virtual_machine_scale_set_name, vm_index=virtual_machine_index)
        return facade.nic_list(resource_group=self.resource_group or None)

    ######################################################################
    # public IP addresses

    PUBLIC_IP_GET_SETS = (ParameterSet('NoExpand', optional=('resource_group', 'name')),
                          ParameterSet('Expand', required=('resource_group', 'name', 'expand_resource')),
                          ParameterSet('ByResourceId', required=('resource_id',), optional=('resource_group',)),
                         )

    @command.printable
    def public_ip_get(self, name=None, resource_id=None, expand_resource=None):
        '''
        Get one public IP address, or list public IP addresses
        '''
        ps = self.parameter_set_select(self.PUBLIC_IP_GET_SETS,
                                       {'resource_group' : self.resource_group,
                                        'name' : name,
                                        'resource_id' : resource_id,
                                        'expand_resource' : expand_resource,
                                       },
                                       default='NoExpand')
        if ps.name == 'ByResourceId':
            azrid = azresourceid_from_text(resource_id, exc_desc='public IP address ID', exc_value=self.exc_value)
            if (not isinstance(azrid, AzResourceId)) or isinstance(azrid, AzSubResourceId) or (azrid.resource_type.lower() != 'publicipaddresses'):
                raise self.exc_value("%r is not a public IP address ID" % resource_id)
            return self.network_facade(subscription_id=azrid.subscription_id).public_ip_get(azrid.resource_group_name, azrid.resource_name)
        facade = self.network_facade()
        if name:
            if not self.resource_group:
                raise self.exc_value("'resource_group' is required to get a public IP address by name")
            return facade.public_ip_get(self.resource_group, name, expand=expand_resource)
        return facade.public_ip_list(resource_group=self.resource_group or None)

    ######################################################################
    # network security groups

    def _nsg_required(self, facade, nsg_name):
        '''
        Return the NetworkSecurityGroupModel named nsg_name or raise
        '''
        if not nsg_name:
            raise self.exc_value("'nsg_name' not specified")
        resource_group = self.resource_group_effective(self.resource_group, exc_value=self.exc_value)
        ret = facade.nsg_get(resource_group, nsg_name)
        if not ret:
            raise self.exc_value("network security group %r not found in resource group %r" % (nsg_name, resource_group))
        return ret

    @command.printable
    def nsg_get(self, nsg_name=None):
        '''
        Get one network security group, or list them
        '''
        facade = self.network_facade()
        if nsg_name:
            return facade.nsg_get(self.resource_group_effective(self.resource_group, exc_value=self.exc_value), nsg_name)
        return facade.nsg_list(resource_group=self.resource_group or None)

    @command.printable
    def nsg_set(self, nsg_name=None, tags=None):
        '''
        Write back an existing network security group, replacing its tags when given
        '''
        facade = self.network_facade()
        nsg = self._nsg_required(facade, nsg_name)
        if tags:
            tags = json_or_file_load(tags, key='tags', exc_value=self.exc_value)
            if not isinstance(tags, dict):
                raise self.exc_value("tags must be a JSON object")
            nsg.sdk.tags = {str(k) : str(v) for k, v in tags.items()}
        return facade.nsg_write(nsg.resource_group_name, nsg.name, nsg.sdk)

    ######################################################################
    # security rule config

    @command.printable
    def security_rule_config_new(self, name=None, description=None, protocol=None,
                                 source_port_range=None, destination_port_range=None,
                                 source_address_prefix=None, destination_address_prefix=None,
                                 source_application_security_group_id=None, destination_application_security_group_id=None,
                                 access=None, priority=None, direction=None):
        '''
        Build a security rule without sending anything to Azure
        '''
        rule = security_rule_new(name,
                                 exc_value=self.exc_value,
                                 description=description,
                                 protocol=protocol,
                                 source_port_range=source_port_range,
                                 destination_port_range=destination_port_range,
                                 source_address_prefix=source_address_prefix,
                                 destination_address_prefix=destination_address_prefix,
                                 source_application_security_group_id=source_application_security_group_id,
                                 destination_application_security_group_id=destination_application_security_group_id,
                                 access=access,
                                 priority=priority,
                                 direction=direction)
        return SecurityRuleModel.from_sdk(rule)

    @command.printable
    def security_rule_config_add(self, nsg_name=None, name=None, description=None, protocol=None,
                                 source_port_range=None, destination_port_range=None,
                                 source_address_prefix=None, destination_address_prefix=None,
                                 source_application_security_group_id=None, destination_application_security_group_id=None,
                                 access=None, priority=None, direction=None):
        '''
        Add a rule to a network security group. The rule must not already exist.
        '''
        facade = self.network_facade()
        nsg = self._nsg_required(facade, nsg_name)
        if not name:
            raise self.exc_value("'name' not specified")
        if security_rule_find(nsg.sdk, name):
            raise self.exc_value("Rule with the specified name already exists")
        rule = security_rule_new(name,
                                 exc_value=self.exc_value,
                                 description=description,
                                 protocol=protocol,
                                 source_port_range=source_port_range,
                                 destination_port_range=destination_port_range,
                                 source_address_prefix=source_address_prefix,
                                 destination_address_prefix=destination_address_prefix,
                                 source_application_security_group_id=source_application_security_group_id,
                                 destination_application_security_group_id=destination_application_security_group_id,
                                 access=access,
                                 priority=priority,
                                 direction=direction)
        nsg.sdk.security_rules = list(nsg.sdk.security_rules or list()) + [rule]
        self.logger.info("%s add rule %r to %s", self.mth(), name, nsg.id)
        return facade.nsg_write(nsg.resource_group_name, nsg.name, nsg.sdk)

    @command.printable
    def security_rule_config_set(self, nsg_name=None, name=None, description=None, protocol=None,
                                 source_port_range=None, destination_port_range=None,
                                 source_address_prefix=None, destination_address_prefix=None,
                                 source_application_security_group_id=None, destination_application_security_group_id=None,
                                 access=None, priority=None, direction=None):
        '''
        Update an existing rule in a network security group.
        Values not given are kept from the existing rule.
        '''
        facade = self.network_facade()
        nsg = self._nsg_required(facade, nsg_name)
        if not name:
            raise self.exc_value("'name' not specified")
        rule = security_rule_find(nsg.sdk, name)
        if not rule:
            raise self.exc_value("Rule with the specified name does not exist")
        security_rule_update(rule,
                             exc_value=self.exc_value,
                             description=description,
                             protocol=protocol,
                             source_port_range=source_port_range,
                             destination_port_range=destination_port_range,
                             source_address_prefix=source_address_prefix,
                             destination_address_prefix=destination_address_prefix,
                             source_application_security_group_id=source_application_security_group_id,
                             destination_application_security_group_id=destination_application_security_group_id,
                             access=access,
                             priority=priority,
                             direction=direction)
        self.logger.info("%s update rule %r in %s", self.mth(), name, nsg.id)
        return facade.nsg_write(nsg.resource_group_name, nsg.name, nsg.sdk)

    @command.printable
    def security_rule_config_remove(self, nsg_name=None, name=None):
        '''
        Remove a rule from a network security group. The rule must exist.
        '''
        facade = self.network_facade()
        nsg = self._nsg_required(facade, nsg_name)
        if not name:
            raise self.exc_value("'name' not specified")
        rule = security_rule_find(nsg.sdk, name)
        if not rule:
            raise self.exc_value("Rule with the specified name does not exist")
        nsg.sdk.security_rules = [x for x in nsg.sdk.security_rules if x is not rule]
        self.logger.info("%s remove rule %r from %s", self.mth(), name, nsg.id)
        return facade.nsg_write(nsg.resource_group_name, nsg.name, nsg.sdk)

    @command.printable
    def security_rule_config_get(self, nsg_name=None, name=None):
        '''
        Get one rule of a network security group, or all of its rules
        '''
        nsg = self._nsg_required(self.network_facade(), nsg_name)
        if name:
            rule = security_rule_find(nsg.sdk, name)
            if not rule:
                raise self.exc_value("Rule with the specified name does not exist")
            return SecurityRuleModel.from_sdk(rule)
        return nsg.security_rules

Manager.command = command

Manager.main(__name__)
