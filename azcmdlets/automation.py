#!/usr/bin/env python3
#
# azcmdlets/automation.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Automation cmdlets: accounts, DSC nodes and reports, node configurations,
compilation jobs, hybrid worker groups, jobs, schedules,
job schedules, credentials, variables, and runbooks.

All operations other than account listing are scoped by
--resource_group and automation_account_name.
'''
import json
import uuid

from azure.mgmt.automation import AutomationClient
from azure.mgmt.automation.models import (AdvancedSchedule,
                                          AdvancedScheduleMonthlyOccurrence,
                                          AutomationAccountCreateOrUpdateParameters,
                                          DscCompilationJobCreateParameters,
                                          DscConfigurationAssociationProperty,
                                          JobCreateParameters,
                                          JobScheduleCreateParameters,
                                          RunbookAssociationProperty,
                                          RunbookUpdateParameters,
                                          ScheduleAssociationProperty,
                                          ScheduleCreateOrUpdateParameters,
                                          Sku,
                                          VariableCreateOrUpdateParameters,
                                         )

import azcmdlets.base_defaults
from azcmdlets.btypes import (AutomationScheduleFrequency,
                              DscNodeStatus,
                             )
from azcmdlets.cmdlet import (PresentationModel,
                              ServiceFacade,
                              ServiceManager,
                             )
from azcmdlets.command import Command
from azcmdlets.parametersets import ParameterSet
from azcmdlets.util import (datetime_normalize,
                            json_or_file_load,
                            odata_and,
                            odata_eq,
                            odata_time,
                            stringlist_normalize,
                            uuid_normalize,
                           )

AUTOMATION_SKU_DEFAULT = 'Basic'

WEEK_DAYS = ('Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday', 'Sunday')

# Occurrence of a weekday within a month; -1 is the last one.
DAY_OF_WEEK_OCCURRENCES = {'First' : 1,
                           'Second' : 2,
                           'Third' : 3,
                           'Fourth' : 4,
                           'Last' : -1,
                          }

######################################################################
# presentation models

class AutomationAccountModel(PresentationModel):
    '''
    azure.mgmt.automation.models.AutomationAccount
    '''
    FIELDS = ('name',
              'id',
              'location',
              'state',
              ('sku', 'sku.name'),
              'creation_time',
              'last_modified_time',
              'tags',
             )
    TABLE_COLUMNS = ('name', 'location', 'state')

class DscNodeModel(PresentationModel):
    '''
    azure.mgmt.automation.models.DscNode
    '''
    FIELDS = ('name',
              'id',
              'node_id',
              'status',
              'ip',
              'account_id',
              ('node_configuration_name', 'node_configuration.name'),
              'last_seen',
              'registration_time',
             )
    TABLE_COLUMNS = ('name', 'status', 'node_configuration_name', 'last_seen')

class DscNodeReportModel(PresentationModel):
    '''
    azure.mgmt.automation.models.DscNodeReport
    '''
    FIELDS = ('id',
              'report_id',
              'status',
              'report_type',
              'refresh_mode',
              'configuration_version',
              'ip_address',
              'host_name',
              'start_time',
              'end_time',
              'last_modified_time',
              'number_of_resources',
             )
    TABLE_COLUMNS = ('report_id', 'status', 'end_time')

class DscNodeConfigurationModel(PresentationModel):
    '''
    azure.mgmt.automation.models.DscNodeConfiguration
    '''
    FIELDS = ('name',
              'id',
              ('configuration_name', 'configuration.name'),
              'source',
              'node_count',
              'increment_node_configuration_build',
              'creation_time',
              'last_modified_time',
             )
    TABLE_COLUMNS = ('name', 'configuration_name', 'node_count')

class DscCompilationJobModel(PresentationModel):
    '''
    azure.mgmt.automation.models.DscCompilationJob
    '''
    FIELDS = ('name',
              'id',
              'job_id',
              ('configuration_name', 'configuration.name'),
              'status',
              'status_details',
              'started_by',
              'parameters',
              'creation_time',
              'start_time',
              'end_time',
              'exception',
             )
    TABLE_COLUMNS = ('job_id', 'configuration_name', 'status', 'start_time')

class HybridRunbookWorkerGroupModel(PresentationModel):
    '''
    azure.mgmt.automation.models.HybridRunbookWorkerGroup
    '''
    FIELDS = ('name',
              'id',
              'group_type',
              ('credential_name', 'credential.name'),
              'hybrid_runbook_workers',
             )
    TABLE_COLUMNS = ('name', 'group_type')

class JobModel(PresentationModel):
    '''
    azure.mgmt.automation.models.Job
    '''
    FIELDS = ('name',
              'id',
              'job_id',
              ('runbook_name', 'runbook.name'),
              'status',
              'status_details',
              'run_on',
              'started_by',
              'parameters',
              'creation_time',
              'start_time',
              'end_time',
              'last_modified_time',
              'exception',
             )
    TABLE_COLUMNS = ('job_id', 'runbook_name', 'status', 'start_time')

class ScheduleModel(PresentationModel):
    '''
    azure.mgmt.automation.models.Schedule
    '''
    FIELDS = ('name',
              'id',
              'description',
              'is_enabled',
              'frequency',
              'interval',
              'start_time',
              'expiry_time',
              'next_run',
              'time_zone',
              ('week_days', 'advanced_schedule.week_days'),
              ('month_days', 'advanced_schedule.month_days'),
             )
    TABLE_COLUMNS = ('name', 'frequency', 'interval', 'next_run')

class JobScheduleModel(PresentationModel):
    '''
    azure.mgmt.automation.models.JobSchedule
    '''
    FIELDS = ('job_schedule_id',
              'id',
              ('schedule_name', 'schedule.name'),
              ('runbook_name', 'runbook.name'),
              'run_on',
              'parameters',
             )
    TABLE_COLUMNS = ('job_schedule_id', 'schedule_name', 'runbook_name')

class CredentialModel(PresentationModel):
    '''
    azure.mgmt.automation.models.Credential
    '''
    FIELDS = ('name',
              'id',
              'user_name',
              'description',
              'creation_time',
              'last_modified_time',
             )
    TABLE_COLUMNS = ('name', 'user_name')

class VariableModel(PresentationModel):
    '''
    azure.mgmt.automation.models.Variable
    '''
    FIELDS = ('name',
              'id',
              'value',
              'is_encrypted',
              'description',
              'creation_time',
              'last_modified_time',
             )
    TABLE_COLUMNS = ('name', 'is_encrypted', 'value')

class RunbookModel(PresentationModel):
    '''
    azure.mgmt.automation.models.Runbook
    '''
    FIELDS = ('name',
              'id',
              'location',
              'runbook_type',
              'state',
              'description',
              'log_verbose',
              'log_progress',
              'log_activity_trace',
              'last_modified_time',
              'tags',
             )
    TABLE_COLUMNS = ('name', 'runbook_type', 'state')

######################################################################
# schedules

def advanced_schedule_build(frequency, days_of_week=None, days_of_month=None, day_of_week=None, day_of_week_occurrence=None,
                            exc_value=azcmdlets.base_defaults.EXC_VALUE_DEFAULT):
    '''
    Return AdvancedSchedule or None.
    frequency is AutomationScheduleFrequency.
    Weekly schedules take days_of_week. Monthly schedules take days_of_month
    or a day_of_week with its occurrence, but not both.
    '''
    week_days = list()
    for day in stringlist_normalize(days_of_week):
        match = [x for x in WEEK_DAYS if x.lower() == day.lower()]
        if not match:
            raise exc_value("invalid day of week %r (expected one of %s)" % (day, ', '.join(WEEK_DAYS)))
        week_days.append(match[0])
    month_days = list()
    for day in stringlist_normalize(days_of_month):
        try:
            val = int(day)
        except ValueError as exc:
            raise exc_value("invalid day of month %r" % day) from exc
        if not ((1 <= val <= 31) or (val == -1)):
            raise exc_value("day of month %d is not in 1..31 or -1 (last day)" % val)
        month_days.append(val)

    if week_days and (frequency != AutomationScheduleFrequency.WEEK):
        raise exc_value("days_of_week applies only to %s schedules" % AutomationScheduleFrequency.WEEK.value)
    if (month_days or day_of_week) and (frequency != AutomationScheduleFrequency.MONTH):
        raise exc_value("days_of_month and day_of_week apply only to %s schedules" % AutomationScheduleFrequency.MONTH.value)
    if month_days and day_of_week:
        raise exc_value("only one of days_of_month or day_of_week may be specified")

    if week_days:
        return AdvancedSchedule(week_days=week_days)
    if month_days:
        return AdvancedSchedule(month_days=month_days)
    if day_of_week:
        match = [x for x in WEEK_DAYS if x.lower() == day_of_week.lower()]
        if not match:
            raise exc_value("invalid day_of_week %r" % day_of_week)
        occ = [v for k, v in DAY_OF_WEEK_OCCURRENCES.items() if k.lower() == (day_of_week_occurrence or '').lower()]
        if not occ:
            raise exc_value("invalid day_of_week_occurrence %r (expected one of %s)" % (day_of_week_occurrence, ', '.join(DAY_OF_WEEK_OCCURRENCES.keys())))
        return AdvancedSchedule(monthly_occurrences=[AdvancedScheduleMonthlyOccurrence(day=match[0], occurrence=occ[0])])
    return None

######################################################################
# facade

class AutomationFacade(ServiceFacade):
    '''
    self.client is azure.mgmt.automation.AutomationClient.
    Everything except the account operations is scoped to
    one automation account.
    '''
    def __init__(self, client, logger, resource_group='', account_name='', **kwargs):
        super().__init__(client, logger, **kwargs)
        self.resource_group = resource_group
        self.account_name = account_name

    def __repr__(self):
        return "<%s %s/%s>" % (type(self).__name__, self.resource_group, self.account_name)

    @property
    def scope(self):
        '''
        Getter: leading positional arguments for account-scoped operations
        '''
        return (self.resource_group, self.account_name)

    ######################################################################
    # accounts

    def account_get(self, resource_group, name):
        '''
        Return AutomationAccountModel or None
        '''
        return AutomationAccountModel.from_sdk(self._cw_get(self.client.automation_account.get, resource_group, name))

    def _account_page(self, resource_group=None, next_link=None):
        '''
        One page of accounts
        '''
        if resource_group:
            return self._cw_page(self.client.automation_account.list_by_resource_group, resource_group, next_link=next_link, transform=AutomationAccountModel.from_sdk)
        return self._cw_page(self.client.automation_account.list, next_link=next_link, transform=AutomationAccountModel.from_sdk)

    def account_list(self, resource_group=None, next_link=None, walk=True):
        '''
        List accounts in the resource group or subscription
        '''
        return self._pages(self._account_page, resource_group=resource_group, next_link=next_link, walk=walk)

    def account_create(self, resource_group, name, location, sku=AUTOMATION_SKU_DEFAULT, tags=None):
        '''
        Create an account
        '''
        params = AutomationAccountCreateOrUpdateParameters(name=name, location=location, sku=Sku(name=sku), tags=tags)
        return AutomationAccountModel.from_sdk(self._cw_call(self.client.automation_account.create_or_update, resource_group, name, params))

    ######################################################################
    # DSC

    def dsc_node_get(self, node_id):
        '''
        Return DscNodeModel or None
        '''
        return DscNodeModel.from_sdk(self._cw_get(self.client.dsc_node.get, *self.scope, node_id))

    def _dsc_node_page(self, filter=None, next_link=None): # pylint: disable=redefined-builtin
        '''
        One page of DSC nodes
        '''
        return self._cw_page(self.client.dsc_node.list_by_automation_account, *self.scope, filter=filter, next_link=next_link, transform=DscNodeModel.from_sdk)

    def dsc_node_list(self, filter=None, next_link=None, walk=True): # pylint: disable=redefined-builtin
        '''
        List DSC nodes matching the OData filter
        '''
        return self._pages(self._dsc_node_page, filter=filter, next_link=next_link, walk=walk)

    def dsc_node_report_get(self, node_id, report_id):
        '''
        Return DscNodeReportModel or None
        '''
        return DscNodeReportModel.from_sdk(self._cw_get(self.client.node_reports.get, *self.scope, node_id, report_id))

    def _dsc_node_report_page(self, node_id, filter=None, next_link=None): # pylint: disable=redefined-builtin
        '''
        One page of reports for the node
        '''
        return self._cw_page(self.client.node_reports.list_by_node, *self.scope, node_id, filter=filter, next_link=next_link, transform=DscNodeReportModel.from_sdk)

    def dsc_node_report_list(self, node_id, filter=None, next_link=None, walk=True): # pylint: disable=redefined-builtin
        '''
        List reports for the node
        '''
        return self._pages(self._dsc_node_report_page, node_id, filter=filter, next_link=next_link, walk=walk)

    def dsc_node_configuration_get(self, name):
        '''
        Return DscNodeConfigurationModel or None
        '''
        return DscNodeConfigurationModel.from_sdk(self._cw_get(self.client.dsc_node_configuration.get, *self.scope, name))

    def _dsc_node_configuration_page(self, filter=None, next_link=None): # pylint: disable=redefined-builtin
        '''
        One page of node configurations
        '''
        return self._cw_page(self.client.dsc_node_configuration.list_by_automation_account, *self.scope, filter=filter, next_link=next_link, transform=DscNodeConfigurationModel.from_sdk)

    def dsc_node_configuration_list(self, filter=None, next_link=None, walk=True): # pylint: disable=redefined-builtin
        '''
        List node configurations
        '''
        return self._pages(self._dsc_node_configuration_page, filter=filter, next_link=next_link, walk=walk)

    def compilation_job_get(self, job_id):
        '''
        Return DscCompilationJobModel or None
        '''
        return DscCompilationJobModel.from_sdk(self._cw_get(self.client.dsc_compilation_job.get, *self.scope, job_id))

    def _compilation_job_page(self, filter=None, next_link=None): # pylint: disable=redefined-builtin
        '''
        One page of compilation jobs
        '''
        return self._cw_page(self.client.dsc_compilation_job.list_by_automation_account, *self.scope, filter=filter, next_link=next_link, transform=DscCompilationJobModel.from_sdk)

    def compilation_job_list(self, filter=None, next_link=None, walk=True): # pylint: disable=redefined-builtin
        '''
        List compilation jobs
        '''
        return self._pages(self._compilation_job_page, filter=filter, next_link=next_link, walk=walk)

    def compilation_job_start(self, job_id, configuration_name, parameters=None, increment_node_configuration_build=None):
        '''
        Start compiling a configuration and wait for the job to be accepted
        '''
        params = DscCompilationJobCreateParameters(configuration=DscConfigurationAssociationProperty(name=configuration_name),
                                                   parameters=parameters or None,
                                                   increment_node_configuration_build=increment_node_configuration_build)
        poller = self._cw_call(self.client.dsc_compilation_job.begin_create, *self.scope, job_id, params)
        return DscCompilationJobModel.from_sdk(self._cw_call(poller.result))

    ######################################################################
    # hybrid workers

    def hybrid_worker_group_get(self, name):
        '''
        Return HybridRunbookWorkerGroupModel or None
        '''
        return HybridRunbookWorkerGroupModel.from_sdk(self._cw_get(self.client.hybrid_runbook_worker_group.get, *self.scope, name))

    def _hybrid_worker_group_page(self, next_link=None):
        '''
        One page of hybrid worker groups
        '''
        return self._cw_page(self.client.hybrid_runbook_worker_group.list_by_automation_account, *self.scope, next_link=next_link, transform=HybridRunbookWorkerGroupModel.from_sdk)

    def hybrid_worker_group_list(self, next_link=None, walk=True):
        '''
        List hybrid worker groups
        '''
        return self._pages(self._hybrid_worker_group_page, next_link=next_link, walk=walk)

    ######################################################################
    # jobs

    def job_get(self, job_id):
        '''
        Return JobModel or None
        '''
        return JobModel.from_sdk(self._cw_get(self.client.job.get, *self.scope, job_id))

    def _job_page(self, filter=None, next_link=None): # pylint: disable=redefined-builtin
        '''
        One page of jobs
        '''
        return self._cw_page(self.client.job.list_by_automation_account, *self.scope, filter=filter, next_link=next_link, transform=JobModel.from_sdk)

    def job_list(self, filter=None, next_link=None, walk=True): # pylint: disable=redefined-builtin
        '''
        List jobs
        '''
        return self._pages(self._job_page, filter=filter, next_link=next_link, walk=walk)

    def job_create(self, job_id, runbook_name, parameters=None, run_on=None):
        '''
        Start a runbook job
        '''
        params = JobCreateParameters(runbook=RunbookAssociationProperty(name=runbook_name),
                                     parameters=parameters or None,
                                     run_on=run_on or None)
        return JobModel.from_sdk(self._cw_call(self.client.job.create, *self.scope, job_id, params))

    ######################################################################
    # schedules

    def schedule_get(self, name):
        '''
        Return ScheduleModel or None
        '''
        return ScheduleModel.from_sdk(self._cw_get(self.client.schedule.get, *self.scope, name))

    def _schedule_page(self, next_link=None):
        '''
        One page of schedules
        '''
        return self._cw_page(self.client.schedule.list_by_automation_account, *self.scope, next_link=next_link, transform=ScheduleModel.from_sdk)

    def schedule_list(self, next_link=None, walk=True):
        '''
        List schedules
        '''
        return self._pages(self._schedule_page, next_link=next_link, walk=walk)

    def schedule_create(self, name, params):
        '''
        params is ScheduleCreateOrUpdateParameters
        '''
        return ScheduleModel.from_sdk(self._cw_call(self.client.schedule.create_or_update, *self.scope, name, params))

    def job_schedule_get(self, job_schedule_id):
        '''
        Return JobScheduleModel or None
        '''
        return JobScheduleModel.from_sdk(self._cw_get(self.client.job_schedule.get, *self.scope, job_schedule_id))

    def _job_schedule_page(self, filter=None, next_link=None): # pylint: disable=redefined-builtin
        '''
        One page of job schedules
        '''
        return self._cw_page(self.client.job_schedule.list_by_automation_account, *self.scope, filter=filter, next_link=next_link, transform=JobScheduleModel.from_sdk)

    def job_schedule_list(self, filter=None, next_link=None, walk=True): # pylint: disable=redefined-builtin
        '''
        List job schedules
        '''
        return self._pages(self._job_schedule_page, filter=filter, next_link=next_link, walk=walk)

    def job_schedule_create(self, job_schedule_id, runbook_name, schedule_name, parameters=None, run_on=None):
        '''
        Link a runbook to a schedule
        '''
        params = JobScheduleCreateParameters(schedule=ScheduleAssociationProperty(name=schedule_name),
                                             runbook=RunbookAssociationProperty(name=runbook_name),
                                             run_on=run_on or None,
                                             parameters=parameters or None)
        return JobScheduleModel.from_sdk(self._cw_call(self.client.job_schedule.create, *self.scope, job_schedule_id, params))

    ######################################################################
    # credentials, variables, runbooks

    def credential_get(self, name):
        '''
        Return CredentialModel or None
        '''
        return CredentialModel.from_sdk(self._cw_get(self.client.credential.get, *self.scope, name))

    def _credential_page(self, next_link=None):
        '''
        One page of credentials
        '''
        return self._cw_page(self.client.credential.list_by_automation_account, *self.scope, next_link=next_link, transform=CredentialModel.from_sdk)

    def credential_list(self, next_link=None, walk=True):
        '''
        List credentials
        '''
        return self._pages(self._credential_page, next_link=next_link, walk=walk)

    def variable_get(self, name):
        '''
        Return VariableModel or None
        '''
        return VariableModel.from_sdk(self._cw_get(self.client.variable.get, *self.scope, name))

    def variable_create(self, name, value, description=None, is_encrypted=False):
        '''
        value is the JSON-serialized variable value
        '''
        params = VariableCreateOrUpdateParameters(name=name, value=value, description=description or None, is_encrypted=bool(is_encrypted))
        return VariableModel.from_sdk(self._cw_call(self.client.variable.create_or_update, *self.scope, name, params))

    def variable_delete(self, name):
        '''
        Delete a variable
        '''
        self._cw_call(self.client.variable.delete, *self.scope, name)

    def runbook_get(self, name):
        '''
        Return RunbookModel or None
        '''
        return RunbookModel.from_sdk(self._cw_get(self.client.runbook.get, *self.scope, name))

    def runbook_update(self, name, description=None, log_verbose=None, log_progress=None, tags=None):
        '''
        Update runbook properties. None means unchanged.
        '''
        params = RunbookUpdateParameters(description=description, log_verbose=log_verbose, log_progress=log_progress, tags=tags)
        return RunbookModel.from_sdk(self._cw_call(self.client.runbook.update, *self.scope, name, params))

######################################################################
# cmdlets

command = Command()

class Manager(ServiceManager):
    '''
    Automation cmdlets
    '''
    ACTION_ARGS = (('automation_account_name', {'help' : 'automation account name'}),
                   ('name', {'help' : 'object name'}),
                   ('id', {'help' : 'object ID (node ID, job ID, job schedule ID, report ID)'}),
                   ('location', {'help' : 'account location'}),
                   ('plan', {'help' : 'account SKU (default %s)' % AUTOMATION_SKU_DEFAULT}),
                   ('tags', {'help' : 'tags as JSON or a path to a JSON file'}),
                   ('status', {'help' : 'status filter'}),
                   ('node_id', {'help' : 'DSC node ID'}),
                   ('node_configuration_name', {'help' : 'DSC node configuration name'}),
                   ('configuration_name', {'help' : 'DSC configuration name'}),
                   ('latest', {'action' : 'store_true', 'help' : 'latest report only'}),
                   ('start_time', {'help' : 'start time (ISO 8601)'}),
                   ('end_time', {'help' : 'end time (ISO 8601)'}),
                   ('expiry_time', {'help' : 'schedule expiry time (ISO 8601)'}),
                   ('parameters', {'help' : 'parameters as a JSON object or a path to a JSON file'}),
                   ('increment_node_configuration_build', {'action' : 'store_true', 'help' : 'create a new node configuration build version'}),
                   ('runbook_name', {'help' : 'runbook name'}),
                   ('schedule_name', {'help' : 'schedule name'}),
                   ('run_on', {'help' : 'hybrid worker group to run on'}),
                   ('frequency', {'help' : 'schedule frequency (%s)' % ', '.join(AutomationScheduleFrequency.values(sort=False))}),
                   ('interval', {'type' : int, 'help' : 'schedule interval'}),
                   ('days_of_week', {'help' : 'comma-separated days for weekly schedules'}),
                   ('days_of_month', {'help' : 'comma-separated days (1..31, -1 for last) for monthly schedules'}),
                   ('day_of_week', {'help' : 'day for monthly schedules by weekday'}),
                   ('day_of_week_occurrence', {'help' : 'occurrence (%s) of day_of_week' % ', '.join(DAY_OF_WEEK_OCCURRENCES.keys())}),
                   ('time_zone', {'help' : 'schedule time zone'}),
                   ('description', {'help' : 'description'}),
                   ('value', {'help' : 'variable value as JSON'}),
                   ('encrypted', {'action' : 'store_true', 'help' : 'encrypt the variable'}),
                   ('log_verbose', {'help' : 'runbook verbose logging (true/false)'}),
                   ('log_progress', {'help' : 'runbook progress logging (true/false)'}),
                  )

    def automation_client(self):
        '''
        Return the AutomationClient for this subscription
        '''
        return self._az_client_gen_property('automation', AutomationClient)

    def automation_facade(self, automation_account_name=None):
        '''
        Return AutomationFacade. With automation_account_name,
        the facade is scoped to that account in the resource group.
        '''
        resource_group = ''
        if automation_account_name is not None:
            if not automation_account_name:
                raise self.exc_value("'automation_account_name' not specified")
            resource_group = self.resource_group_effective(self.resource_group, exc_value=self.exc_value)
        return AutomationFacade(self.automation_client(), self.logger,
                                resource_group=resource_group,
                                account_name=automation_account_name or '',
                                exc_value=self.exc_value)

    def _facade(self, automation_account_name):
        '''
        Account-scoped facade; the account name is required
        '''
        return self.automation_facade(automation_account_name=automation_account_name or '')

    def _parameters_load(self, parameters, serialize=False):
        '''
        Return the parameters dict or None.
        With serialize, values that are not strings are JSON-encoded.
        '''
        ret = json_or_file_load(parameters, key='parameters', exc_value=self.exc_value)
        if ret is None:
            return None
        if not isinstance(ret, dict):
            raise self.exc_value("parameters must be a JSON object")
        if serialize:
            ret = {k : v if isinstance(v, str) else json.dumps(v) for k, v in ret.items()}
        return ret

    def _time(self, value, key):
        '''
        Parse a time parameter
        '''
        return datetime_normalize(value, key=key, exc_value=self.exc_value)

    ######################################################################
    # accounts

    @command.printable
    def account_get(self, name=None):
        '''
        Get one automation account (needs --resource_group), or list them
        '''
        facade = self.automation_facade()
        if name:
            return facade.account_get(self.resource_group_effective(self.resource_group, exc_value=self.exc_value), name)
        return facade.account_list(resource_group=self.resource_group or None)

    @command.printable
    def account_new(self, name=None, location=None, plan=None, tags=None):
        '''
        Create an automation account. An existing account is an error.
        '''
        if not name:
            raise self.exc_value("'name' not specified")
        if not location:
            raise self.exc_value("'location' not specified")
        resource_group = self.resource_group_effective(self.resource_group, exc_value=self.exc_value)
        facade = self.automation_facade()
        if facade.account_get(resource_group, name):
            raise self.exc_value("automation account %r already exists in resource group %r" % (name, resource_group))
        return facade.account_create(resource_group, name, location, sku=plan or AUTOMATION_SKU_DEFAULT, tags=self.tags_normalize(tags))

    ######################################################################
    # DSC

    DSC_NODE_GET_SETS = (ParameterSet('ById', required=('id',)),
                         ParameterSet('ByName', required=('name',), optional=('status',)),
                         ParameterSet('ByNodeConfiguration', required=('node_configuration_name',), optional=('status',)),
                         ParameterSet('ByConfiguration', required=('configuration_name',), optional=('status',)),
                         ParameterSet('ByAll', optional=('status',)),
                        )

    @command.printable
    def dsc_node_get(self, automation_account_name=None, id=None, name=None, node_configuration_name=None, configuration_name=None, status=None): # pylint: disable=redefined-builtin
        '''
        Get DSC nodes
        '''
        ps = self.parameter_set_select(self.DSC_NODE_GET_SETS,
                                       {'id' : id,
                                        'name' : name,
                                        'node_configuration_name' : node_configuration_name,
                                        'configuration_name' : configuration_name,
                                        'status' : status,
                                       },
                                       default='ByAll')
        facade = self._facade(automation_account_name)
        if ps.name == 'ById':
            return facade.dsc_node_get(uuid_normalize(id, exc_value=self.exc_value))
        status = DscNodeStatus.coerce_optional(status, exc_value=self.exc_value, prefix='status')
        status_filter = odata_eq('properties/status', status.value if status else None)
        if ps.name == 'ByName':
            return facade.dsc_node_list(filter=odata_and(odata_eq('name', name), status_filter))
        if ps.name == 'ByNodeConfiguration':
            return facade.dsc_node_list(filter=odata_and(odata_eq('properties/nodeConfiguration/name', node_configuration_name), status_filter))
        if ps.name == 'ByConfiguration':
            ret = list()
            for node_configuration in facade.dsc_node_configuration_list(filter=odata_eq('properties/configuration/name', configuration_name)):
                ret.extend(facade.dsc_node_list(filter=odata_and(odata_eq('properties/nodeConfiguration/name', node_configuration.name), status_filter)))
            return ret
        return facade.dsc_node_list(filter=status_filter)

    DSC_NODE_REPORT_GET_SETS = (ParameterSet('ById', required=('node_id', 'id')),
                                ParameterSet('ByLatest', required=('node_id', 'latest')),
                                ParameterSet('ByAll', required=('node_id',), optional=('start_time', 'end_time')),
                               )

    @command.printable
    def dsc_node_report_get(self, automation_account_name=None, node_id=None, id=None, latest=None, start_time=None, end_time=None): # pylint: disable=redefined-builtin
        '''
        Get reports for a DSC node
        '''
        ps = self.parameter_set_select(self.DSC_NODE_REPORT_GET_SETS,
                                       {'node_id' : node_id,
                                        'id' : id,
                                        'latest' : latest or None,
                                        'start_time' : start_time,
                                        'end_time' : end_time,
                                       },
                                       default='ByAll')
        facade = self._facade(automation_account_name)
        node_id = uuid_normalize(node_id, exc_value=self.exc_value)
        if ps.name == 'ById':
            return facade.dsc_node_report_get(node_id, uuid_normalize(id, exc_value=self.exc_value))
        if ps.name == 'ByLatest':
            reports = facade.dsc_node_report_list(node_id)
            dated = [x for x in reports if x.end_time]
            if dated:
                return max(dated, key=lambda x: x.end_time)
            return reports[0] if reports else None
        filt = odata_and(odata_time('properties/endTime', 'ge', self._time(start_time, 'start_time')),
                         odata_time('properties/endTime', 'le', self._time(end_time, 'end_time')))
        return facade.dsc_node_report_list(node_id, filter=filt)

    @command.printable
    def dsc_node_configuration_get(self, automation_account_name=None, name=None, configuration_name=None):
        '''
        Get one node configuration, or list them (optionally for one configuration)
        '''
        facade = self._facade(automation_account_name)
        if name:
            return facade.dsc_node_configuration_get(name)
        return facade.dsc_node_configuration_list(filter=odata_eq('properties/configuration/name', configuration_name))

    COMPILATION_JOB_GET_SETS = (ParameterSet('ById', required=('id',)),
                                ParameterSet('ByConfigurationName', required=('configuration_name',), optional=('status', 'start_time', 'end_time')),
                                ParameterSet('ByAll', optional=('status', 'start_time', 'end_time')),
                               )

    @command.printable
    def compilation_job_get(self, automation_account_name=None, id=None, configuration_name=None, status=None, start_time=None, end_time=None): # pylint: disable=redefined-builtin
        '''
        Get one compilation job, or list them
        '''
        ps = self.parameter_set_select(self.COMPILATION_JOB_GET_SETS,
                                       {'id' : id,
                                        'configuration_name' : configuration_name,
                                        'status' : status,
                                        'start_time' : start_time,
                                        'end_time' : end_time,
                                       },
                                       default='ByAll')
        facade = self._facade(automation_account_name)
        if ps.name == 'ById':
            return facade.compilation_job_get(uuid_normalize(id, exc_value=self.exc_value))
        filt = odata_and(odata_time('properties/startTime', 'ge', self._time(start_time, 'start_time')),
                         odata_time('properties/endTime', 'le', self._time(end_time, 'end_time')),
                         odata_eq('properties/status', status),
                         odata_eq('properties/configuration/name', configuration_name))
        return facade.compilation_job_list(filter=filt)

    @command.printable
    def compilation_job_start(self, automation_account_name=None, configuration_name=None, parameters=None, increment_node_configuration_build=None):
        '''
        Start compiling a DSC configuration
        '''
        if not configuration_name:
            raise self.exc_value("'configuration_name' not specified")
        job_id = str(uuid.uuid4())
        self.logger.info("%s compile %r as job %s", self.mth(), configuration_name, job_id)
        return self._facade(automation_account_name).compilation_job_start(job_id,
                                                                           configuration_name,
                                                                           parameters=self._parameters_load(parameters),
                                                                           increment_node_configuration_build=bool(increment_node_configuration_build))

    ######################################################################
    # hybrid workers and jobs

    @command.printable
    def hybrid_worker_group_get(self, automation_account_name=None, name=None):
        '''
        Get one hybrid worker group, or list them
        '''
        facade = self._facade(automation_account_name)
        if name:
            return facade.hybrid_worker_group_get(name)
        return facade.hybrid_worker_group_list()

    @command.printable
    def job_get(self, automation_account_name=None, id=None, runbook_name=None, status=None, start_time=None, end_time=None): # pylint: disable=redefined-builtin
        '''
        Get one job, or list jobs with optional filters
        '''
        facade = self._facade(automation_account_name)
        if id:
            return facade.job_get(uuid_normalize(id, exc_value=self.exc_value))
        filt = odata_and(odata_time('properties/startTime', 'ge', self._time(start_time, 'start_time')),
                         odata_time('properties/endTime', 'le', self._time(end_time, 'end_time')),
                         odata_eq('properties/status', status),
                         odata_eq('properties/runbook/name', runbook_name))
        return facade.job_list(filter=filt)

    ######################################################################
    # schedules

    @command.printable
    def schedule_get(self, automation_account_name=None, name=None):
        '''
        Get one schedule, or list them
        '''
        facade = self._facade(automation_account_name)
        if name:
            return facade.schedule_get(name)
        return facade.schedule_list()

    @command.printable
    def schedule_new(self, automation_account_name=None, name=None, start_time=None, expiry_time=None, frequency=None, interval=None,
                     days_of_week=None, days_of_month=None, day_of_week=None, day_of_week_occurrence=None, time_zone=None, description=None):
        '''
        Create a schedule. OneTime schedules take no interval.
        Recurring schedules need an interval of at least 1.
        '''
        if not name:
            raise self.exc_value("'name' not specified")
        start = self._time(start_time, 'start_time')
        if not start:
            raise self.exc_value("'start_time' not specified")
        frequency = AutomationScheduleFrequency.coerce(frequency or AutomationScheduleFrequency.ONE_TIME.value, exc_value=self.exc_value, prefix='frequency')
        if frequency == AutomationScheduleFrequency.ONE_TIME:
            if interval is not None:
                raise self.exc_value("interval does not apply to %s schedules" % frequency.value)
        elif (interval is None) or (int(interval) < 1):
            raise self.exc_value("%s schedules need an interval of at least 1" % frequency.value)
        expiry = self._time(expiry_time, 'expiry_time')
        if expiry and (expiry <= start):
            raise self.exc_value("expiry_time must be after start_time")
        params = ScheduleCreateOrUpdateParameters(name=name,
                                                  description=description or None,
                                                  start_time=start,
                                                  expiry_time=expiry,
                                                  frequency=frequency.value,
                                                  interval=int(interval) if interval is not None else None,
                                                  time_zone=time_zone or None,
                                                  advanced_schedule=advanced_schedule_build(frequency,
                                                                                            days_of_week=days_of_week,
                                                                                            days_of_month=days_of_month,
                                                                                            day_of_week=day_of_week,
                                                                                            day_of_week_occurrence=day_of_week_occurrence,
                                                                                            exc_value=self.exc_value))
        return self._facade(automation_account_name).schedule_create(name, params)

    @command.printable
    def job_schedule_get(self, automation_account_name=None, id=None, runbook_name=None, schedule_name=None): # pylint: disable=redefined-builtin
        '''
        Get one job schedule, or list them filtered by runbook and/or schedule
        '''
        facade = self._facade(automation_account_name)
        if id:
            return facade.job_schedule_get(uuid_normalize(id, exc_value=self.exc_value))
        filt = odata_and(odata_eq('properties/runbook/name', runbook_name),
                         odata_eq('properties/schedule/name', schedule_name))
        return facade.job_schedule_list(filter=filt)

    @command.printable
    def job_schedule_register(self, automation_account_name=None, runbook_name=None, schedule_name=None, parameters=None, run_on=None):
        '''
        Link a runbook to a schedule
        '''
        if not runbook_name:
            raise self.exc_value("'runbook_name' not specified")
        if not schedule_name:
            raise self.exc_value("'schedule_name' not specified")
        return self._facade(automation_account_name).job_schedule_create(str(uuid.uuid4()),
                                                                         runbook_name,
                                                                         schedule_name,
                                                                         parameters=self._parameters_load(parameters, serialize=True),
                                                                         run_on=run_on)

    ######################################################################
    # credentials, variables, runbooks

    @command.printable
    def credential_get(self, automation_account_name=None, name=None):
        '''
        Get one credential, or list them
        '''
        facade = self._facade(automation_account_name)
        if name:
            return facade.credential_get(name)
        return facade.credential_list()

    @command.printable
    def variable_new(self, automation_account_name=None, name=None, value=None, description=None, encrypted=None):
        '''
        Create a variable. value is JSON text; a value that is
        not valid JSON is stored as a JSON string.
        '''
        if not name:
            raise self.exc_value("'name' not specified")
        if value is None:
            raise self.exc_value("'value' not specified")
        try:
            serialized = json.dumps(json.loads(value))
        except ValueError:
            serialized = json.dumps(value)
        return self._facade(automation_account_name).variable_create(name, serialized, description=description, is_encrypted=bool(encrypted))

    @command.simple
    def variable_remove(self, automation_account_name=None, name=None):
        '''
        Delete a variable
        '''
        if not name:
            raise self.exc_value("'name' not specified")
        self._facade(automation_account_name).variable_delete(name)
        return True

    @command.printable
    def runbook_set(self, automation_account_name=None, name=None, description=None, log_verbose=None, log_progress=None, tags=None):
        '''
        Update runbook properties
        '''
        if not name:
            raise self.exc_value("'name' not specified")
        return self._facade(automation_account_name).runbook_update(name,
                                                                    description=description or None,
                                                                    log_verbose=self.bool_optional(log_verbose, key='log_verbose'),
                                                                    log_progress=self.bool_optional(log_progress, key='log_progress'),
                                                                    tags=self.tags_normalize(tags))

    @command.printable
    def runbook_start(self, automation_account_name=None, name=None, parameters=None, run_on=None):
        '''
        Start a runbook job. Parameter values that are not strings are JSON-encoded.
        '''
        if not name:
            raise self.exc_value("'name' not specified")
        job_id = str(uuid.uuid4())
        self.logger.info("%s start runbook %r as job %s", self.mth(), name, job_id)
        return self._facade(automation_account_name).job_create(job_id, name, parameters=self._parameters_load(parameters, serialize=True), run_on=run_on)

Manager.command = command

Manager.main(__name__)
