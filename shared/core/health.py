"""
Health, readiness and metrics endpoints.

Response bodies follow the "Health Check Response Format for HTTP APIs"
draft: an overall ``status`` of pass/warn/fail plus one entry per checked
component.
"""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine
from typing import Callable, Dict, Any, Optional
import os
import time
import redis
from datetime import datetime
from enum import Enum
import psutil
import logging

logger = logging.getLogger(__name__)

ComponentCheck = Callable[[], Dict[str, Any]]

class HealthStatus(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    WARN = "warn"

def _now() -> str:
    return datetime.utcnow().isoformat() + "Z"

def _component(status_val: HealthStatus, component_type: str, **fields: Any) -> Dict[str, Any]:
    return {"status": status_val, "componentType": component_type, **fields, "time": _now()}

def _threshold(value: float, fail_below: float, warn_below: float) -> HealthStatus:
    if value < fail_below:
        return HealthStatus.FAIL
    if value < warn_below:
        return HealthStatus.WARN
    return HealthStatus.PASS

def _timed(probe: Callable[[], Any]) -> float:
    """Run ``probe`` and return how long it took in milliseconds."""
    start = time.perf_counter()
    probe()
    return (time.perf_counter() - start) * 1000

class ServiceHealth:
    """
    Builds the health router for the API.

    ``engine`` is probed for readiness and migrations; ``redis_url`` is probed
    only when given. ``extra_checks`` adds components to the readiness report
    and ``config_check`` is run at startup.
    """

    def __init__(
        self,
        service_name: str,
        version: str,
        engine: Engine,
        redis_url: Optional[str] = None,
        extra_checks: Optional[Dict[str, ComponentCheck]] = None,
        config_check: Optional[ComponentCheck] = None,
    ):
        self.service_name = service_name
        self.version = version
        self.engine = engine
        self.redis_url = redis_url
        self.extra_checks = extra_checks or {}
        self.config_check = config_check
        self.start_time = time.time()
        self.checks_performed = 0

    def _report(self, checks: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        return {
            "status": self._calculate_overall_status(checks),
            "serviceId": self.service_name,
            "version": self.version,
            "releaseId": os.getenv("RELEASE_ID", "unknown"),
            "checks": checks,
            "timestamp": _now(),
        }

    def create_health_router(self) -> APIRouter:
        router = APIRouter(tags=["health"])

        @router.get("/health")
        async def health_check() -> Dict[str, Any]:
            """Cheap summary for load balancers; touches no dependency."""
            return {
                "status": HealthStatus.PASS,
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": round(time.time() - self.start_time, 1),
                "timestamp": _now(),
            }

        @router.get("/health/live")
        async def liveness() -> Dict[str, Any]:
            return {"status": "alive"}

        @router.get("/health/ready")
        async def readiness() -> JSONResponse:
            """Check every dependency; 503 when any of them fails."""
            report = self._report(self.perform_readiness_checks())
            code = status.HTTP_503_SERVICE_UNAVAILABLE if report["status"] == HealthStatus.FAIL else status.HTTP_200_OK
            return JSONResponse(status_code=code, content=report)

        @router.get("/health/startup")
        async def startup() -> JSONResponse:
            report = self._report(self.perform_startup_checks())
            if report["status"] == HealthStatus.FAIL:
                return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content=report)
            return JSONResponse(content=report)

        @router.get("/metrics")
        async def metrics() -> Dict[str, Any]:
            process = psutil.Process()
            with process.oneshot():
                memory = process.memory_info()
                system = {
                    "memory_rss_bytes": memory.rss,
                    "memory_vms_bytes": memory.vms,
                    "cpu_percent": process.cpu_percent(),
                    "num_threads": process.num_threads(),
                }
            return {
                "service": self.service_name,
                "version": self.version,
                "uptime_seconds": round(time.time() - self.start_time, 1),
                "readiness_checks_performed": self.checks_performed,
                "system": system,
                "timestamp": _now(),
            }

        return router

    def perform_readiness_checks(self) -> Dict[str, Dict[str, Any]]:
        self.checks_performed += 1

        checks = {"database:connectivity": self._check_database()}
        if self.redis_url:
            checks["cache:connectivity"] = self._check_redis()
        checks["storage:disk_space"] = self._check_disk_space()
        checks["system:memory"] = self._check_memory()
        for name, check in self.extra_checks.items():
            checks[name] = self._run_extra(check)
        return checks

    def perform_startup_checks(self) -> Dict[str, Dict[str, Any]]:
        checks = {"database:migrations": self._check_migrations()}
        if self.config_check:
            checks["config:environment"] = self._run_extra(self.config_check)
        return checks

    def _run_extra(self, check: ComponentCheck) -> Dict[str, Any]:
        try:
            result = check()
        except Exception as e:
            logger.error(f"Health check raised: {e}")
            return {"status": HealthStatus.FAIL, "output": str(e), "time": _now()}
        result.setdefault("time", _now())
        return result

    def _check_database(self) -> Dict[str, Any]:
        try:
            elapsed_ms = _timed(self._probe_database)
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return _component(HealthStatus.FAIL, "datastore", output=str(e))
        return _component(HealthStatus.PASS, "datastore", observedValue=f"{elapsed_ms:.2f}", observedUnit="ms")

    def _probe_database(self) -> None:
        with self.engine.connect() as conn:
            conn.execute(text("SELECT 1")).fetchone()

    def _check_redis(self) -> Dict[str, Any]:
        try:
            elapsed_ms = _timed(lambda: redis.from_url(self.redis_url, socket_connect_timeout=1).ping())
        except Exception as e:
            # Dashboards fall back to the in-process cache
            return _component(HealthStatus.WARN, "cache", output=str(e))
        return _component(HealthStatus.PASS, "cache", observedValue=f"{elapsed_ms:.2f}", observedUnit="ms")

    def _check_disk_space(self) -> Dict[str, Any]:
        try:
            free_gb = psutil.disk_usage("/").free / (1024 ** 3)
        except Exception as e:
            return _component(HealthStatus.WARN, "system", output=str(e))
        return _component(_threshold(free_gb, fail_below=1, warn_below=5), "system",
                          observedValue=f"{free_gb:.2f}", observedUnit="GB")

    def _check_memory(self) -> Dict[str, Any]:
        try:
            available_mb = psutil.virtual_memory().available / (1024 ** 2)
        except Exception as e:
            return _component(HealthStatus.WARN, "system", output=str(e))
        return _component(_threshold(available_mb, fail_below=100, warn_below=500), "system",
                          observedValue=f"{available_mb:.2f}", observedUnit="MB")

    def _check_migrations(self) -> Dict[str, Any]:
        try:
            applied = inspect(self.engine).has_table("alembic_version")
        except Exception as e:
            return _component(HealthStatus.FAIL, "datastore", output=str(e))
        if applied:
            return _component(HealthStatus.PASS, "datastore")
        return _component(HealthStatus.WARN, "datastore", output="Migrations table not found")

    def _calculate_overall_status(self, checks: Dict[str, Dict[str, Any]]) -> HealthStatus:
        statuses = [check.get("status", HealthStatus.PASS) for check in checks.values()]

        if HealthStatus.FAIL in statuses:
            return HealthStatus.FAIL
        if HealthStatus.WARN in statuses:
            return HealthStatus.WARN
        return HealthStatus.PASS
