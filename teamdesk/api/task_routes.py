from fastapi import APIRouter, Depends, Query, Response, status

from teamdesk.api.deps import RequestContext, get_request_context, resolver, service_errors
from teamdesk.db.models import Task
from teamdesk.schemas.tasks import (
    SubmissionReviewRequest,
    TaskCommentRequest,
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
    TaskSubmissionRequest,
    TaskUpdateRequest,
)
from teamdesk.services.task_service import TaskService

router = APIRouter(prefix="/v1/tasks", tags=["tasks"])
task_service = TaskService(resolver)


def _to_response(ctx: RequestContext, task: Task) -> TaskResponse:
    return TaskResponse(
        id=task.id,
        title=task.title,
        description=task.description or "",
        due_date=task.due_date,
        status=task.status,
        domain=task.domain,
        assignees=task.assignees or [],
        assigned_to_lead=task.assigned_to_lead,
        comments=task.comments or [],
        submissions=task.submissions or [],
        attachment=task.attachment,
        created_by=task.created_by,
        can_manage=task_service.can_manage(ctx.principal, ctx.domains, task),
    )


@router.get("", response_model=TaskListResponse)
def list_tasks(
    domain: str | None = Query(default=None),
    ctx: RequestContext = Depends(get_request_context),
) -> TaskListResponse:
    with service_errors(ctx.db, "Failed to fetch tasks"):
        rows = task_service.list_visible(ctx.db, ctx.principal, ctx.domains, domain=domain)
        items = [_to_response(ctx, row) for row in rows]
    return TaskListResponse(items=items, count=len(items))


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    request: TaskCreateRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> TaskResponse:
    with service_errors(ctx.db, "Failed to create task"):
        task = task_service.create(ctx.db, ctx.principal, ctx.domains, request)
        ctx.log("Task Management", f'Task created: "{task.title}"')
        ctx.db.commit()
        return _to_response(ctx, task)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, ctx: RequestContext = Depends(get_request_context)) -> TaskResponse:
    with service_errors(ctx.db, "Failed to fetch task"):
        task = task_service.get_visible(ctx.db, ctx.principal, ctx.domains, task_id)
        return _to_response(ctx, task)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: str,
    request: TaskUpdateRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> TaskResponse:
    with service_errors(ctx.db, "Failed to update task"):
        task = task_service.update(ctx.db, ctx.principal, ctx.domains, task_id, request)
        ctx.log("Task Management", f"Task updated: (ID: {task_id})")
        ctx.db.commit()
        return _to_response(ctx, task)


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(task_id: str, ctx: RequestContext = Depends(get_request_context)) -> Response:
    with service_errors(ctx.db, "Failed to delete task"):
        task_service.delete(ctx.db, ctx.principal, ctx.domains, task_id)
        ctx.log("Task Management", f"Task deleted: (ID: {task_id})")
        ctx.db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{task_id}/comments", response_model=TaskResponse)
def comment_on_task(
    task_id: str,
    request: TaskCommentRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> TaskResponse:
    with service_errors(ctx.db, "Failed to add comment"):
        task = task_service.add_comment(ctx.db, ctx.principal, ctx.domains, task_id, request.text)
        ctx.db.commit()
        return _to_response(ctx, task)


@router.post("/{task_id}/submissions", response_model=TaskResponse)
def submit_task_work(
    task_id: str,
    request: TaskSubmissionRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> TaskResponse:
    with service_errors(ctx.db, "Failed to record submission"):
        task = task_service.add_submission(ctx.db, ctx.principal, ctx.domains, task_id, request.file)
        ctx.log("Submissions", f"Submission added to task (ID: {task_id})")
        ctx.db.commit()
        return _to_response(ctx, task)


@router.patch("/{task_id}/submissions/{submission_id}", response_model=TaskResponse)
def review_submission(
    task_id: str,
    submission_id: str,
    request: SubmissionReviewRequest,
    ctx: RequestContext = Depends(get_request_context),
) -> TaskResponse:
    with service_errors(ctx.db, "Failed to rate submission"):
        task = task_service.review_submission(
            ctx.db,
            ctx.principal,
            ctx.domains,
            task_id,
            submission_id,
            request.model_dump(exclude_unset=True),
        )
        ctx.log("Submissions", f"Submission {submission_id} rated on task (ID: {task_id})")
        ctx.db.commit()
        return _to_response(ctx, task)
