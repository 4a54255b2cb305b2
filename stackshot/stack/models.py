import dataclasses
import enum
from datetime import datetime
from typing import Dict, List, Optional, TypedDict

from stackshot.stack.errors import InvalidStackConfigError

EventId = str
StackId = str
StackName = str
NextToken = str
Capability = str


class StackStatus(str):
    CREATE_IN_PROGRESS = "CREATE_IN_PROGRESS"
    CREATE_FAILED = "CREATE_FAILED"
    CREATE_COMPLETE = "CREATE_COMPLETE"
    ROLLBACK_IN_PROGRESS = "ROLLBACK_IN_PROGRESS"
    ROLLBACK_FAILED = "ROLLBACK_FAILED"
    ROLLBACK_COMPLETE = "ROLLBACK_COMPLETE"
    DELETE_IN_PROGRESS = "DELETE_IN_PROGRESS"
    DELETE_FAILED = "DELETE_FAILED"
    DELETE_COMPLETE = "DELETE_COMPLETE"
    UPDATE_IN_PROGRESS = "UPDATE_IN_PROGRESS"
    UPDATE_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_COMPLETE = "UPDATE_COMPLETE"
    UPDATE_FAILED = "UPDATE_FAILED"
    UPDATE_ROLLBACK_IN_PROGRESS = "UPDATE_ROLLBACK_IN_PROGRESS"
    UPDATE_ROLLBACK_FAILED = "UPDATE_ROLLBACK_FAILED"
    UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS = "UPDATE_ROLLBACK_COMPLETE_CLEANUP_IN_PROGRESS"
    UPDATE_ROLLBACK_COMPLETE = "UPDATE_ROLLBACK_COMPLETE"
    REVIEW_IN_PROGRESS = "REVIEW_IN_PROGRESS"


class OnFailure(str):
    DO_NOTHING = "DO_NOTHING"
    ROLLBACK = "ROLLBACK"
    DELETE = "DELETE"


ON_FAILURE_VALUES = (OnFailure.DO_NOTHING, OnFailure.ROLLBACK, OnFailure.DELETE)

# Statuses after which no further change happens without new operator action. The value tells whether the
# stack operation succeeded. Any status missing from this table is treated as still in progress.
TERMINAL_STATUSES: Dict[str, bool] = {
    StackStatus.CREATE_COMPLETE: True,
    StackStatus.UPDATE_COMPLETE: True,
    StackStatus.CREATE_FAILED: False,
    StackStatus.UPDATE_FAILED: False,
    StackStatus.UPDATE_ROLLBACK_COMPLETE: False,
    StackStatus.UPDATE_ROLLBACK_FAILED: False,
    StackStatus.DELETE_COMPLETE: False,
    StackStatus.DELETE_FAILED: False,
    StackStatus.ROLLBACK_FAILED: False,
    StackStatus.ROLLBACK_COMPLETE: False,
}


class Parameter(TypedDict, total=False):
    ParameterKey: Optional[str]
    ParameterValue: Optional[str]


Parameters = List[Parameter]


class Tag(TypedDict, total=False):
    Key: str
    Value: str


Tags = List[Tag]


class Stack(TypedDict, total=False):
    StackId: Optional[StackId]
    StackName: StackName
    Description: Optional[str]
    Parameters: Optional[Parameters]
    CreationTime: datetime
    LastUpdatedTime: Optional[datetime]
    StackStatus: StackStatus
    StackStatusReason: Optional[str]
    DisableRollback: Optional[bool]
    Capabilities: Optional[List[Capability]]
    Tags: Optional[Tags]
    EnableTerminationProtection: Optional[bool]


class DescribeStacksOutput(TypedDict, total=False):
    Stacks: Optional[List[Stack]]
    NextToken: Optional[NextToken]


class StackEvent(TypedDict, total=False):
    StackId: StackId
    EventId: EventId
    StackName: StackName
    LogicalResourceId: Optional[str]
    PhysicalResourceId: Optional[str]
    ResourceType: Optional[str]
    Timestamp: datetime
    ResourceStatus: Optional[str]
    ResourceStatusReason: Optional[str]


class DescribeStackEventsOutput(TypedDict, total=False):
    StackEvents: Optional[List[StackEvent]]
    NextToken: Optional[NextToken]


class CreateStackInput(TypedDict, total=False):
    StackName: StackName
    TemplateBody: Optional[str]
    TemplateURL: Optional[str]
    Parameters: Optional[Parameters]
    DisableRollback: Optional[bool]
    Capabilities: Optional[List[Capability]]
    OnFailure: Optional[OnFailure]
    Tags: Optional[Tags]
    EnableTerminationProtection: Optional[bool]


class UpdateStackInput(TypedDict, total=False):
    StackName: StackName
    TemplateBody: Optional[str]
    TemplateURL: Optional[str]
    Parameters: Optional[Parameters]
    Capabilities: Optional[List[Capability]]
    Tags: Optional[Tags]


class SyncResult(enum.Enum):
    """Outcome of submitting the stack configuration to CloudFormation."""

    CREATED = "created"
    UPDATED = "updated"
    # CloudFormation rejected the update because the stack already matches the configuration
    NO_UPDATES = "no-updates"


@dataclasses.dataclass(frozen=True)
class StackConfig:
    """
    The desired state of a CloudFormation stack.

    ``template_path`` only records where a template was read from, the loader stores the file contents in
    ``template_body``. Exactly one of ``template_body`` and ``template_url`` is sent to CloudFormation.
    ``disable_rollback``, ``enable_termination_protection`` and ``on_failure`` only apply when the stack is
    created.
    """

    name: str
    template_body: Optional[str] = None
    template_url: Optional[str] = None
    template_path: Optional[str] = None
    parameters: Dict[str, str] = dataclasses.field(default_factory=dict)
    tags: Dict[str, str] = dataclasses.field(default_factory=dict)
    capabilities: List[Capability] = dataclasses.field(default_factory=list)
    disable_rollback: bool = False
    enable_termination_protection: bool = False
    on_failure: Optional[OnFailure] = None

    def validate(self) -> None:
        """
        Checks the constraints CloudFormation would otherwise reject.

        :raises InvalidStackConfigError: if a required field is missing or two exclusive fields are set
        """
        missing = []
        if not self.name:
            missing.append("name")
        if not self.template_body and not self.template_url:
            missing.append("template_url/template_body/template_path")
        if missing:
            raise InvalidStackConfigError(f"Missing fields from document: {', '.join(missing)}")

        if self.template_body and self.template_url:
            raise InvalidStackConfigError(
                "only one of template_url, template_body, template_path can be set"
            )

        if self.on_failure and self.disable_rollback:
            raise InvalidStackConfigError("disable_rollback and on_failure cannot both be set")

        if self.on_failure and self.on_failure not in ON_FAILURE_VALUES:
            raise InvalidStackConfigError(
                f"on_failure must be one of {', '.join(ON_FAILURE_VALUES)}, got {self.on_failure}"
            )
