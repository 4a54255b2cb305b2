"""
Loads stack configurations from YAML documents like the following::

    Name: my-stack
    TemplateURL: https://my-bucket.s3.amazonaws.com/template.yaml
    Parameters:
      VpcId: vpc-123abcde789
    Tags:
      team: alpha
    Capabilities:
      - CAPABILITY_IAM
    EnableTerminationProtection: false
    DisableRollback: false
    OnFailure: DELETE

Keys are matched ignoring case and underscores, so ``template_url`` and ``TemplateURL`` are the same field.
The template is given by exactly one of ``TemplateURL``, ``TemplatePath`` (read relative to the document) and
``TemplateBody`` (either a string or the template itself as a YAML mapping).
"""
import logging
import os
from typing import Any, Dict, List, Optional, Union

import yaml

from stackshot.constants import TRUE_STRINGS
from stackshot.stack.errors import InvalidStackConfigError
from stackshot.stack.models import StackConfig

LOG = logging.getLogger(__name__)

FIELDS = {
    "name": "name",
    "templatebody": "template_body",
    "templateurl": "template_url",
    "templatepath": "template_path",
    "parameters": "parameters",
    "tags": "tags",
    "capabilities": "capabilities",
    "disablerollback": "disable_rollback",
    "enableterminationprotection": "enable_termination_protection",
    "onfailure": "on_failure",
}

TEMPLATE_FIELDS = ("template_url", "template_body", "template_path")


class StackDocumentLoader(yaml.SafeLoader):
    """
    A SafeLoader that keeps date and time scalars as strings, so values like
    ``AWSTemplateFormatVersion: 2010-09-09`` reach CloudFormation the way they were written.
    """


StackDocumentLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_stack_config(path: str) -> StackConfig:
    """
    Reads and parses the stack configuration document at the given path.

    :raises InvalidStackConfigError: if the file cannot be read or does not contain a valid configuration
    """
    try:
        with open(path, "r") as fd:
            doc = fd.read()
    except OSError as e:
        raise InvalidStackConfigError(f"Could not read file: {path}") from e

    return parse_stack_config(doc, base_dir=os.path.dirname(os.path.abspath(path)))


def parse_stack_config(doc: Union[str, bytes], base_dir: Optional[str] = None) -> StackConfig:
    """
    Parses a stack configuration document.

    :param doc: the YAML document
    :param base_dir: the directory a ``TemplatePath`` is relative to, defaults to the working directory
    :raises InvalidStackConfigError: if the document is not valid YAML or not a valid configuration
    """
    try:
        document = yaml.load(doc, Loader=StackDocumentLoader)
    except yaml.YAMLError as e:
        raise InvalidStackConfigError(f"failed to parse YAML: {e}") from e

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise InvalidStackConfigError("failed to parse YAML: the document must be a mapping")

    values = _map_fields(document)

    missing = []
    if not values.get("name"):
        missing.append("name")
    templates = [field for field in TEMPLATE_FIELDS if values.get(field)]
    if not templates:
        missing.append("/".join(TEMPLATE_FIELDS))
    if missing:
        raise InvalidStackConfigError(f"Missing fields from document: {', '.join(missing)}")

    if len(templates) > 1:
        raise InvalidStackConfigError(
            f"only one of {', '.join(TEMPLATE_FIELDS)} can be set, got {', '.join(templates)}"
        )

    template_path = values.get("template_path")
    if template_path:
        template_body = _read_template(str(template_path), base_dir)
    else:
        template_body = _template_body(values.get("template_body"))

    stack_config = StackConfig(
        name=str(values["name"]),
        template_body=template_body,
        template_url=values.get("template_url") or None,
        template_path=str(template_path) if template_path else None,
        parameters=_string_mapping("parameters", values.get("parameters")),
        tags=_string_mapping("tags", values.get("tags")),
        capabilities=_string_list("capabilities", values.get("capabilities")),
        disable_rollback=_to_bool(values.get("disable_rollback")),
        enable_termination_protection=_to_bool(values.get("enable_termination_protection")),
        on_failure=values.get("on_failure") or None,
    )
    stack_config.validate()
    return stack_config


def _map_fields(document: Dict[Any, Any]) -> Dict[str, Any]:
    values = {}
    for key, value in document.items():
        field = FIELDS.get(str(key).replace("_", "").replace("-", "").lower())
        if not field:
            LOG.debug("Ignoring unknown field %s in stack configuration", key)
            continue
        values[field] = value
    return values


def _read_template(template_path: str, base_dir: Optional[str]) -> str:
    path = os.path.join(base_dir or os.getcwd(), os.path.expanduser(template_path))
    try:
        with open(path, "r") as fd:
            return fd.read()
    except OSError as e:
        raise InvalidStackConfigError(f"Could not read template file: {template_path}") from e


def _template_body(body: Any) -> Optional[str]:
    if body is None:
        return None
    if isinstance(body, (dict, list)):
        return yaml.safe_dump(body, default_flow_style=False, sort_keys=False)
    return str(body)


def _to_string(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip() in TRUE_STRINGS
    return bool(value)


def _string_mapping(field: str, value: Any) -> Dict[str, str]:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise InvalidStackConfigError(f"{field} must be a mapping of names to values")
    return {str(k): _to_string(v) for k, v in value.items()}


def _string_list(field: str, value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list):
        raise InvalidStackConfigError(f"{field} must be a list")
    return [str(item) for item in value]
