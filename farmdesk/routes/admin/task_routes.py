# farmdesk/routes/admin/task_routes.py

import logging

from flask import Blueprint, flash, redirect, render_template, request, url_for
from pydantic import ValidationError

from farmdesk.errors import FarmApiError, SessionExpiredError
from farmdesk.models.task_models import TaskCreate
from farmdesk.routes.guards import require_admin
from farmdesk.services.context import task_service

logger = logging.getLogger(__name__)

tasks_bp = Blueprint(
    "admin_tasks_bp",
    __name__,
    url_prefix="/admin/tasks",
)

TASK_FILTERS = ("status", "priority", "category", "assignedTo")


@tasks_bp.get("/")
def tasks_page():
    ok, resp = require_admin()
    if not ok:
        return resp

    filters = {k: request.args.get(k, "") for k in TASK_FILTERS}
    service = task_service()
    tasks, metrics = [], {}
    try:
        tasks = service.get_all_tasks(**filters)
        metrics = service.get_task_metrics()
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error fetching tasks: %s", e.message)
        flash("Failed to load tasks", "error")

    return render_template(
        "admin/tasks.html",
        active_page="tasks",
        tasks=tasks,
        metrics=metrics,
        filters=filters,
    )


@tasks_bp.get("/new")
def new_task_page():
    ok, resp = require_admin()
    if not ok:
        return resp
    return render_template("admin/task_form.html", active_page="tasks", form={}, errors={})


@tasks_bp.post("/new")
def create_task():
    ok, resp = require_admin()
    if not ok:
        return resp

    form = request.form.to_dict()
    try:
        task = TaskCreate.model_validate(form)
    except ValidationError as e:
        errors = {str(err["loc"][0]): err["msg"] for err in e.errors()}
        flash("Please fill in all required fields", "error")
        return render_template("admin/task_form.html", active_page="tasks", form=form, errors=errors), 400

    try:
        task_service().create_task(task)
    except SessionExpiredError:
        raise
    except FarmApiError as e:
        logger.error("Error creating task: %s", e.message)
        flash(e.message or "Failed to create task", "error")
        return render_template("admin/task_form.html", active_page="tasks", form=form, errors={}), 400

    flash("Task created successfully", "success")
    return redirect(url_for("admin_tasks_bp.tasks_page"))
