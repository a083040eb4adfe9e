#
# azcmdlets/btypes.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Basic types. Nothing here imports from the repo except azcmdlets.base_defaults.

The value-set enums carry the strings Azure uses. Cmdlets accept
them in any case and hand the canonical value to the SDK.
'''
import enum

from azcmdlets.base_defaults import EXC_VALUE_DEFAULT

class EnumMixin():
    '''
    Mixed into the enums below rather than subclassed from
    so pylint still sees them as plain enums.
    '''
    @classmethod
    def values(cls, sort=True):
        '''
        Valid values, sorted unless sort is false (declaration order)
        '''
        ret = [x.value for x in cls]
        return sorted(ret) if sort else ret

    @classmethod
    def _missing_(cls, value):
        if isinstance(value, str):
            lv = value.lower()
            for x in cls:
                if isinstance(x.value, str) and (x.value.lower() == lv):
                    return x
        return None

    @classmethod
    def coerce(cls, value, exc_value=EXC_VALUE_DEFAULT, prefix=''):
        '''
        Return value as a member of cls, raising exc_value
        with the list of valid values when it is not one.
        '''
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as exc:
            txt = "%r is not one of %s" % (value, ', '.join(cls.values(sort=False)))
            raise exc_value("%s: %s" % (prefix, txt) if prefix else txt) from exc

    @classmethod
    def coerce_optional(cls, value, exc_value=EXC_VALUE_DEFAULT, prefix=''):
        '''
        coerce(), except None and '' become None
        '''
        if value in (None, ''):
            return None
        return cls.coerce(value, exc_value=exc_value, prefix=prefix)

class ReadOnlyDict(dict):
    '''
    dict whose mutators raise TypeError
    '''
    def _readonly(self, *args, **kwargs):
        raise TypeError("%s is read-only" % type(self).__name__)

    __delitem__ = _readonly
    __setitem__ = _readonly
    clear = _readonly
    pop = _readonly
    popitem = _readonly
    setdefault = _readonly
    update = _readonly

class LogTo(EnumMixin, enum.Enum):
    '''
    Logging destinations for Application
    '''
    STDERR = 'stderr'
    STDOUT = 'stdout'

class AsrEventSeverity(EnumMixin, enum.Enum):
    '''
    Site recovery event severities
    '''
    CRITICAL = 'Critical'
    WARNING = 'Warning'
    OK = 'OK'
    UNKNOWN = 'Unknown'

class AsrJobState(EnumMixin, enum.Enum):
    '''
    Site recovery job states
    '''
    NOT_STARTED = 'NotStarted'
    IN_PROGRESS = 'InProgress'
    SUCCEEDED = 'Succeeded'
    OTHER = 'Other'
    FAILED = 'Failed'
    CANCELLED = 'Cancelled'
    SUSPENDED = 'Suspended'

class AsrEventType(EnumMixin, enum.Enum):
    '''
    Site recovery event types
    '''
    VM_HEALTH = 'VmHealth'
    SERVER_HEALTH = 'ServerHealth'
    AGENT_HEALTH = 'AgentHealth'
    ASR_EVENT = 'AsrEvent'

class AsrFailoverDirection(EnumMixin, enum.Enum):
    '''
    Site recovery failover directions
    '''
    PRIMARY_TO_RECOVERY = 'PrimaryToRecovery'
    RECOVERY_TO_PRIMARY = 'RecoveryToPrimary'

class AsrFailbackOptimize(EnumMixin, enum.Enum):
    '''
    What a Hyper-V to Azure failback waits for: the data sync option
    '''
    FOR_DOWN_TIME = 'ForDownTime'
    FOR_SYNCHRONIZATION = 'ForSynchronization'

class AsrRecoveryTag(EnumMixin, enum.Enum):
    '''
    Which recovery point a recovery plan failover uses
    '''
    LATEST = 'Latest'
    LATEST_AVAILABLE = 'LatestAvailable'
    LATEST_AVAILABLE_APPLICATION_CONSISTENT = 'LatestAvailableApplicationConsistent'
    LATEST_AVAILABLE_CRASH_CONSISTENT = 'LatestAvailableCrashConsistent'

class AutomationScheduleFrequency(EnumMixin, enum.Enum):
    '''
    Automation schedule frequencies
    '''
    ONE_TIME = 'OneTime'
    HOUR = 'Hour'
    DAY = 'Day'
    WEEK = 'Week'
    MONTH = 'Month'

class DscNodeStatus(EnumMixin, enum.Enum):
    '''
    Automation DSC node compliance status
    '''
    COMPLIANT = 'Compliant'
    NOT_COMPLIANT = 'NotCompliant'
    FAILED = 'Failed'
    PENDING = 'Pending'
    RECEIVED = 'Received'
    UNRESPONSIVE = 'Unresponsive'

class KeyVaultKeyType(EnumMixin, enum.Enum):
    '''
    KeyVault key types
    '''
    RSA = 'RSA'
    RSA_HSM = 'RSA-HSM'
    EC = 'EC'
    EC_HSM = 'EC-HSM'
    OCT = 'oct'

class LockLevel(EnumMixin, enum.Enum):
    '''
    Management lock levels
    '''
    CAN_NOT_DELETE = 'CanNotDelete'
    READ_ONLY = 'ReadOnly'

class NsgRuleAccess(EnumMixin, enum.Enum):
    '''
    Network security rule access
    '''
    ALLOW = 'Allow'
    DENY = 'Deny'

class NsgRuleDirection(EnumMixin, enum.Enum):
    '''
    Network security rule direction
    '''
    INBOUND = 'Inbound'
    OUTBOUND = 'Outbound'

class NsgRuleProtocol(EnumMixin, enum.Enum):
    '''
    Network security rule protocol
    '''
    TCP = 'Tcp'
    UDP = 'Udp'
    ANY = '*'

class SchedulerJobActionType(EnumMixin, enum.Enum):
    '''
    Scheduler job action types
    '''
    HTTP = 'Http'
    HTTPS = 'Https'
    STORAGE_QUEUE = 'StorageQueue'
    SERVICE_BUS_QUEUE = 'ServiceBusQueue'
    SERVICE_BUS_TOPIC = 'ServiceBusTopic'

class SchedulerJobState(EnumMixin, enum.Enum):
    '''
    Scheduler job states
    '''
    ENABLED = 'Enabled'
    DISABLED = 'Disabled'
    FAULTED = 'Faulted'
    COMPLETED = 'Completed'

class SchedulerRecurrenceFrequency(EnumMixin, enum.Enum):
    '''
    Scheduler job recurrence frequencies
    '''
    MINUTE = 'Minute'
    HOUR = 'Hour'
    DAY = 'Day'
    WEEK = 'Week'
    MONTH = 'Month'

class PolicyMode(EnumMixin, enum.Enum):
    '''
    Policy definition modes
    '''
    ALL = 'All'
    INDEXED = 'Indexed'

class WorkflowState(EnumMixin, enum.Enum):
    '''
    Logic app workflow states that may be set
    '''
    ENABLED = 'Enabled'
    DISABLED = 'Disabled'
