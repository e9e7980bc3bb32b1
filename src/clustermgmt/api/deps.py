from __future__ import annotations

from fastapi import Request

from clustermgmt.lifecycle import LifecycleCoordinator


def get_coordinator(request: Request) -> LifecycleCoordinator:
    return request.app.state.coordinator
