"""Server-side task invocation.

Tasks run on the server; the client only posts parameters and returns the
task's ``result``.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from basebase.core.constants import API_VERSION
from basebase.domain.exceptions import InternalError, InvalidArgumentError
from basebase.domain.paths import SEPARATOR, validate_project_id
from basebase.firestore.references import send_request

if TYPE_CHECKING:
    from basebase.core.registry import Basebase

logger = logging.getLogger(__name__)


def _split_task_name(basebase: Basebase, task_name: str) -> tuple[str, str]:
    if not task_name or not isinstance(task_name, str):
        raise InvalidArgumentError("Task name must be a non-empty string", field="task_name")
    parts = task_name.split(SEPARATOR)
    if len(parts) == 1:
        return basebase.project_id, parts[0]
    if len(parts) == 2 and all(parts):
        validate_project_id(parts[0])
        return parts[0], parts[1]
    raise InvalidArgumentError(
        'Task name must be "taskName" or "projectName/taskName"', field="task_name"
    )


async def do_task(
    basebase: Basebase,
    task_name: str,
    parameters: dict[str, Any] | None = None,
) -> Any:
    """Run a task and return its result.

    Args:
        basebase: Instance to call through.
        task_name: ``"task"`` (default project) or ``"project/task"``.
        parameters: JSON-serializable task input.

    Raises:
        InternalError: If the task reports an error.
    """
    project_id, task = _split_task_name(basebase, task_name)
    url = f"{basebase.base_url}/{API_VERSION}/projects/{project_id}/tasks/{task}:do"
    logger.debug("Running task %s in project %s", task, project_id)
    resp = await send_request(basebase, url, "POST", body={"data": parameters or {}})
    if not isinstance(resp, dict):
        return resp
    error = resp.get("error")
    if error:
        message = str(error)
        if resp.get("details"):
            message = f"{message}: {resp['details']}"
        raise InternalError(message)
    return resp.get("result")
