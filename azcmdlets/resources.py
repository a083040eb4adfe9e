#!/usr/bin/env python3
#
# azcmdlets/resources.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Resource cmdlets: resource providers, provider features, and management locks.
'''
from azure.mgmt.resource import (FeatureClient,
                                 ManagementLockClient,
                                 ResourceManagementClient,
                                )
from azure.mgmt.resource.locks.models import ManagementLockObject

from azcmdlets.azresourceid import (AzRGResourceId,
                                    AzSubscriptionResourceId,
                                    azresourceid_from_text,
                                   )
from azcmdlets.btypes import LockLevel
from azcmdlets.cmdlet import (PresentationModel,
                              ServiceFacade,
                              ServiceManager,
                             )
from azcmdlets.command import Command
from azcmdlets.parametersets import ParameterSet
from azcmdlets.util import stringlist_normalize

FEATURE_STATE_REGISTERED = 'Registered'
PROVIDER_STATE_REGISTERED = 'Registered'

FILTER_AT_SCOPE = 'atScope()'

def location_key(location):
    '''
    Comparison key for a location: 'East US' and 'eastus' compare equal.
    '''
    return (location or '').replace(' ', '').lower()

def resource_type_in_location(resource_type, location):
    '''
    Return whether the SDK ProviderResourceType is offered in location.
    Types that list no locations are available everywhere.
    '''
    locations = resource_type.locations or list()
    if not locations:
        return True
    key = location_key(location)
    return any(location_key(x) == key for x in locations)

######################################################################
# presentation models

class ProviderResourceTypeModel(PresentationModel):
    '''
    azure.mgmt.resource.resources.models.ProviderResourceType
    '''
    FIELDS = ('resource_type',
              'locations',
              'api_versions',
             )

class ProviderModel(PresentationModel):
    '''
    azure.mgmt.resource.resources.models.Provider
    resource_types is a list of ProviderResourceTypeModel.
    '''
    FIELDS = ('namespace',
              'id',
              'registration_state',
              'resource_types',
             )
    TABLE_COLUMNS = ('namespace', 'registration_state')

    @classmethod
    def from_sdk(cls, obj):
        ret = super().from_sdk(obj)
        if ret is not None:
            ret.resource_types = ProviderResourceTypeModel.from_sdk_list(ret.resource_types or list())
        return ret

    def per_resource_type(self):
        '''
        Return a list with one ProviderModel per resource type
        '''
        return [ProviderModel(sdk=self.sdk,
                              namespace=self.namespace,
                              id=self.id,
                              registration_state=self.registration_state,
                              resource_types=[rt])
                for rt in self.resource_types]

class FeatureModel(PresentationModel):
    '''
    azure.mgmt.resource.features.models.FeatureResult
    '''
    FIELDS = ('name',
              'id',
              ('state', 'properties.state'),
             )
    TABLE_COLUMNS = ('name', 'state')

    @property
    def provider_namespace(self):
        '''
        Getter: feature names are Namespace/FeatureName
        '''
        return (self.name or '').split('/')[0]

    @property
    def feature_name(self):
        '''
        Getter
        '''
        return (self.name or '').split('/')[-1]

class LockModel(PresentationModel):
    '''
    azure.mgmt.resource.locks.models.ManagementLockObject
    '''
    FIELDS = ('name',
              'id',
              'level',
              'notes',
              'owners',
             )
    TABLE_COLUMNS = ('name', 'level', 'notes')

######################################################################
# facades

class ProviderFacade(ServiceFacade):
    '''
    self.client is azure.mgmt.resource.ResourceManagementClient
    '''
    def provider_get(self, namespace):
        '''
        Return ProviderModel or None
        '''
        return ProviderModel.from_sdk(self._cw_get(self.client.providers.get, namespace))

    def _provider_page(self, next_link=None):
        '''
        One page of providers
        '''
        return self._cw_page(self.client.providers.list, next_link=next_link, transform=ProviderModel.from_sdk)

    def provider_list(self, next_link=None, walk=True):
        '''
        List all providers, registered or not
        '''
        return self._pages(self._provider_page, next_link=next_link, walk=walk)

    def provider_register(self, namespace):
        '''
        Register the subscription with the provider
        '''
        return ProviderModel.from_sdk(self._cw_call(self.client.providers.register, namespace))

    def provider_unregister(self, namespace):
        '''
        Unregister the subscription from the provider
        '''
        return ProviderModel.from_sdk(self._cw_call(self.client.providers.unregister, namespace))

class FeatureFacade(ServiceFacade):
    '''
    self.client is azure.mgmt.resource.FeatureClient
    '''
    def feature_get(self, namespace, feature_name):
        '''
        Return FeatureModel or None
        '''
        return FeatureModel.from_sdk(self._cw_get(self.client.features.get, namespace, feature_name))

    def _feature_page(self, namespace=None, next_link=None):
        '''
        One page of features; all namespaces when namespace is not given
        '''
        if namespace:
            return self._cw_page(self.client.features.list, namespace, next_link=next_link, transform=FeatureModel.from_sdk)
        return self._cw_page(self.client.features.list_all, next_link=next_link, transform=FeatureModel.from_sdk)

    def feature_list(self, namespace=None, next_link=None, walk=True):
        '''
        List features
        '''
        return self._pages(self._feature_page, namespace=namespace, next_link=next_link, walk=walk)

    def feature_register(self, namespace, feature_name):
        '''
        Register the feature
        '''
        return FeatureModel.from_sdk(self._cw_call(self.client.features.register, namespace, feature_name))

class LockFacade(ServiceFacade):
    '''
    self.client is azure.mgmt.resource.ManagementLockClient.
    All operations take a scope (any resource ID text).
    '''
    def lock_get(self, scope, name):
        '''
        Return LockModel or None
        '''
        return LockModel.from_sdk(self._cw_get(self.client.management_locks.get_by_scope, str(scope), name))

    def _lock_page(self, scope, filter=None, next_link=None): # pylint: disable=redefined-builtin
        '''
        One page of locks at the scope
        '''
        return self._cw_page(self.client.management_locks.list_by_scope, str(scope), filter=filter, next_link=next_link, transform=LockModel.from_sdk)

    def lock_list(self, scope, filter=None, next_link=None, walk=True): # pylint: disable=redefined-builtin
        '''
        List locks at the scope
        '''
        return self._pages(self._lock_page, scope, filter=filter, next_link=next_link, walk=walk)

    def lock_create(self, scope, name, level, notes=None):
        '''
        Create or replace a lock
        '''
        lock = ManagementLockObject(level=level, notes=notes or None)
        return LockModel.from_sdk(self._cw_call(self.client.management_locks.create_or_update_by_scope, str(scope), name, lock))

    def lock_delete(self, scope, name):
        '''
        Delete a lock
        '''
        self._cw_call(self.client.management_locks.delete_by_scope, str(scope), name)

######################################################################
# cmdlets

command = Command()

class Manager(ServiceManager):
    '''
    Resource provider, feature, and lock cmdlets
    '''
    ACTION_ARGS = (('provider_namespace', {'help' : 'resource provider namespace(s), comma-separated'}),
                   ('feature_name', {'help' : 'provider feature name'}),
                   ('location', {'help' : 'only resource types offered in this location'}),
                   ('list_available', {'action' : 'store_true', 'help' : 'include providers and features that are not registered'}),
                   ('name', {'help' : 'lock name'}),
                   ('scope', {'help' : 'lock scope (resource ID); defaults to the resource group or subscription'}),
                   ('at_scope', {'action' : 'store_true', 'help' : 'only locks at or above the scope'}),
                   ('level', {'help' : 'lock level (%s)' % ', '.join(LockLevel.values(sort=False))}),
                   ('notes', {'help' : 'lock notes'}),
                  )

    def provider_facade(self, subscription_id=None):
        '''
        Return ProviderFacade
        '''
        client = self._az_client_gen_property('resource', ResourceManagementClient, subscription_id=subscription_id)
        return ProviderFacade(client, self.logger, exc_value=self.exc_value)

    def feature_facade(self, subscription_id=None):
        '''
        Return FeatureFacade
        '''
        client = self._az_client_gen_property('feature', FeatureClient, subscription_id=subscription_id)
        return FeatureFacade(client, self.logger, exc_value=self.exc_value)

    def lock_facade(self, subscription_id=None):
        '''
        Return LockFacade
        '''
        client = self._az_client_gen_property('lock', ManagementLockClient, subscription_id=subscription_id)
        return LockFacade(client, self.logger, exc_value=self.exc_value)

    ######################################################################
    # providers

    PROVIDER_GET_SETS = (ParameterSet('ListAvailable', required=('list_available',), optional=('location',)),
                         ParameterSet('IndividualProvider', required=('provider_namespace',), optional=('location',)),
                         ParameterSet('Registered', optional=('location',)),
                        )

    @command.printable
    def provider_get(self, provider_namespace=None, location=None, list_available=None):
        '''
        List resource providers. With provider_namespace, there is
        one result per resource type of each named provider.
        '''
        ps = self.parameter_set_select(self.PROVIDER_GET_SETS,
                                       {'provider_namespace' : provider_namespace,
                                        'location' : location,
                                        'list_available' : list_available or None,
                                       },
                                       default='Registered')
        facade = self.provider_facade()
        all_providers = facade.provider_list()
        if ps.name == 'IndividualProvider':
            providers = list()
            for namespace in stringlist_normalize(provider_namespace):
                provider = facade.provider_get(namespace)
                if not provider:
                    raise self.exc_value("resource provider %r not found" % namespace)
                providers.append(provider)
        elif ps.name == 'ListAvailable':
            providers = all_providers
        else:
            providers = [x for x in all_providers if (x.registration_state or '').lower() == PROVIDER_STATE_REGISTERED.lower()]

        if location:
            known = {location_key(loc) for p in all_providers for rt in p.resource_types for loc in (rt.locations or list())}
            if location_key(location) not in known:
                self.logger.error("%s location %r is not valid", self.mth(), location)
                return list()
            filtered = list()
            for provider in providers:
                rts = [rt for rt in provider.resource_types if resource_type_in_location(rt, location)]
                if rts:
                    filtered.append(provider)
            providers = filtered

        if ps.name == 'IndividualProvider':
            ret = list()
            for provider in providers:
                for expanded in provider.per_resource_type():
                    if location and (not resource_type_in_location(expanded.resource_types[0], location)):
                        continue
                    ret.append(expanded)
            return ret
        return providers

    @command.printable_table
    def provider_list_table(self, list_available=None):
        '''
        Table of providers
        '''
        return self.provider_get(list_available=list_available)

    def _namespace_required(self, provider_namespace):
        '''
        Return the single namespace given or raise
        '''
        namespaces = stringlist_normalize(provider_namespace)
        if len(namespaces) != 1:
            raise self.exc_value("exactly one provider_namespace must be specified")
        return namespaces[0]

    @command.printable
    def provider_register(self, provider_namespace=None):
        '''
        Register the subscription with a resource provider
        '''
        namespace = self._namespace_required(provider_namespace)
        self.logger.info("%s register %s in subscription %s", self.mth(), namespace, self.subscription_id)
        return self.provider_facade().provider_register(namespace)

    @command.printable
    def provider_unregister(self, provider_namespace=None):
        '''
        Unregister the subscription from a resource provider
        '''
        namespace = self._namespace_required(provider_namespace)
        self.logger.info("%s unregister %s in subscription %s", self.mth(), namespace, self.subscription_id)
        return self.provider_facade().provider_unregister(namespace)

    ######################################################################
    # features

    FEATURE_GET_SETS = (ParameterSet('ListAvailable', required=('list_available',), optional=('provider_namespace',)),
                        ParameterSet('GetFeature', required=('provider_namespace',), optional=('feature_name',)),
                        ParameterSet('Registered'),
                       )

    @command.printable
    def feature_get(self, provider_namespace=None, feature_name=None, list_available=None):
        '''
        Get provider features. Without list_available, only
        registered features are returned.
        '''
        ps = self.parameter_set_select(self.FEATURE_GET_SETS,
                                       {'provider_namespace' : provider_namespace,
                                        'feature_name' : feature_name,
                                        'list_available' : list_available or None,
                                       },
                                       default='Registered')
        facade = self.feature_facade()
        if (ps.name == 'GetFeature') and feature_name:
            ret = facade.feature_get(provider_namespace, feature_name)
            if not ret:
                raise self.exc_value("feature %r not found in provider %r" % (feature_name, provider_namespace))
            return [ret]
        features = facade.feature_list(namespace=provider_namespace or None)
        if ps.name == 'ListAvailable':
            return features
        return [x for x in features if (x.state or '').lower() == FEATURE_STATE_REGISTERED.lower()]

    @command.printable
    def feature_register(self, provider_namespace=None, feature_name=None):
        '''
        Register a provider feature
        '''
        namespace = self._namespace_required(provider_namespace)
        if not feature_name:
            raise self.exc_value("'feature_name' not specified")
        return self.feature_facade().feature_register(namespace, feature_name)

    ######################################################################
    # locks

    def _lock_scope(self, scope):
        '''
        Return the lock scope as AzAnyResourceId.
        The default is the resource group when one is known,
        otherwise the subscription.
        '''
        if scope:
            return azresourceid_from_text(scope, exc_desc='scope', exc_value=self.exc_value)
        if self.resource_group:
            return AzRGResourceId(self.subscription_id, self.resource_group, exc_value=self.exc_value)
        return AzSubscriptionResourceId(self.subscription_id, exc_value=self.exc_value)

    @command.printable
    def lock_get(self, name=None, scope=None, at_scope=None):
        '''
        Get one lock by name, or list the locks at the scope.
        Without at_scope, the list includes locks at, above, and below the scope.
        '''
        azrid = self._lock_scope(scope)
        facade = self.lock_facade(subscription_id=azrid.subscription_id)
        if name:
            return facade.lock_get(azrid, name)
        return facade.lock_list(azrid, filter=FILTER_AT_SCOPE if at_scope else None)

    @command.printable
    def lock_new(self, name=None, scope=None, level=None, notes=None):
        '''
        Create a lock
        '''
        if not name:
            raise self.exc_value("'name' not specified")
        if not level:
            raise self.exc_value("'level' not specified")
        level = LockLevel.coerce(level, exc_value=self.exc_value, prefix='level')
        azrid = self._lock_scope(scope)
        self.logger.info("%s %s lock %r at %s", self.mth(), level.value, name, azrid)
        return self.lock_facade(subscription_id=azrid.subscription_id).lock_create(azrid, name, level.value, notes=notes)

    @command.simple
    def lock_remove(self, name=None, scope=None):
        '''
        Delete a lock. A missing lock is an error.
        '''
        if not name:
            raise self.exc_value("'name' not specified")
        azrid = self._lock_scope(scope)
        facade = self.lock_facade(subscription_id=azrid.subscription_id)
        if not facade.lock_get(azrid, name):
            raise self.exc_value("the resource lock %r could not be found at %s" % (name, azrid))
        facade.lock_delete(azrid, name)
        return True

Manager.command = command

Manager.main(__name__)
