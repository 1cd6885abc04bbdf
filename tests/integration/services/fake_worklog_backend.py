"""In-process work-plan backend for integration tests.

Serves the REST endpoints and a push endpoint that, like the real server,
replays its cache of recent events to every new subscriber. Because
``httpx.ASGITransport`` buffers response bodies, the push stream ends
after the replay instead of staying open.
"""

import json
from datetime import datetime
from typing import Any

from fastapi import FastAPI, File, Form, Header, UploadFile
from fastapi.responses import JSONResponse, RedirectResponse, Response, StreamingResponse

EVENT_CACHE_SIZE = 100


class FakeWorkLogBackend:
    """Backend state plus the FastAPI app that exposes it."""

    def __init__(self) -> None:
        self.rows: dict[int, dict[str, Any]] = {}
        self.events: list[str] = []
        self.requests: list[tuple[str, str, str | None]] = []
        self._next_id = 1
        self.app = self._build_app()

    # ── State helpers ──

    def seed(self, work_datetime: str, car_model: str = "K5", **fields: Any) -> dict:
        """Insert a row directly and announce it, as another client would."""
        record = {
            "id": self._next_id,
            "workDatetime": work_datetime,
            "carModel": car_model,
            "productColor": None,
            "productCode": None,
            "productName": None,
            "quantity": 1,
            "completedAt": None,
            "completedBy": None,
            "createdAt": datetime.now().isoformat(timespec="seconds"),
        }
        record.update(fields)
        self.rows[record["id"]] = record
        self._next_id += 1
        self.broadcast("worklog-created", record)
        return record

    def broadcast(self, event_type: str, data: dict[str, Any]) -> None:
        self.events.append(f"event: {event_type}\ndata: {json.dumps(data)}\n\n")
        del self.events[:-EVENT_CACHE_SIZE]

    def _listing(
        self,
        rows: list[dict],
        sort_field: str | None,
        sort_direction: str | None,
        status: str | None,
    ) -> list[dict]:
        if status == "completed":
            rows = [r for r in rows if r["completedAt"]]
        elif status == "incomplete":
            rows = [r for r in rows if not r["completedAt"]]
        field = sort_field or "workDatetime"
        return sorted(
            rows,
            key=lambda r: (r.get(field) is None, r.get(field) or ""),
            reverse=sort_direction == "DESC",
        )

    # ── App ──

    def _build_app(self) -> FastAPI:
        app = FastAPI(title="fake work-plan backend")
        backend = self

        @app.get("/api/worklogs")
        async def list_work_logs(
            sortField: str | None = None,
            sortDirection: str | None = None,
            status: str | None = None,
        ) -> list[dict]:
            return backend._listing(list(backend.rows.values()), sortField, sortDirection, status)

        @app.get("/api/worklogs/date/{date}")
        async def list_by_date(
            date: str,
            sortField: str | None = None,
            sortDirection: str | None = None,
            status: str | None = None,
        ) -> dict:
            compact = f"{date[2:4]}.{date[5:7]}.{date[8:10]}"
            rows = [r for r in backend.rows.values() if r["workDatetime"].startswith(compact)]
            listed = backend._listing(rows, sortField, sortDirection, status)
            return {"workLogs": listed, "totalCount": len(listed)}

        @app.get("/api/worklogs/{record_id}")
        async def get_work_log(record_id: int):
            if record_id not in backend.rows:
                return JSONResponse({"message": "Work log not found"}, status_code=404)
            return backend.rows[record_id]

        @app.post("/api/worklogs")
        async def create_work_log(
            body: dict, x_client_id: str | None = Header(default=None)
        ) -> dict:
            backend.requests.append(("POST", "/api/worklogs", x_client_id))
            fields = _write_fields(body)
            record = backend.seed(fields.pop("workDatetime"), fields.pop("carModel"), **fields)
            return {"id": record["id"]}

        @app.put("/api/worklogs/{record_id}")
        async def update_work_log(
            record_id: int, body: dict, x_client_id: str | None = Header(default=None)
        ):
            backend.requests.append(("PUT", f"/api/worklogs/{record_id}", x_client_id))
            if record_id not in backend.rows:
                return JSONResponse({"message": "Work log not found"}, status_code=404)
            record = backend.rows[record_id]
            record.update(_write_fields(body))
            backend.broadcast("worklog-updated", record)
            return Response(status_code=204)

        @app.put("/api/worklogs/{record_id}/status")
        async def update_status(
            record_id: int, body: dict, x_client_id: str | None = Header(default=None)
        ):
            if record_id not in backend.rows:
                return JSONResponse({"message": "Work log not found"}, status_code=404)
            record = backend.rows[record_id]
            completed = bool(body.get("completed"))
            record["completedAt"] = datetime.now().isoformat(timespec="seconds") if completed else None
            record["completedBy"] = x_client_id
            backend.broadcast("worklog-updated", record)
            return {"message": "Status updated successfully.", "completed": completed}

        @app.delete("/api/worklogs/{record_id}")
        async def delete_work_log(record_id: int):
            if backend.rows.pop(record_id, None) is None:
                return JSONResponse({"message": "Work log not found"}, status_code=404)
            backend.broadcast("worklog-deleted", {"id": record_id})
            return Response(status_code=200)

        @app.post("/excel/upload")
        async def upload(file: UploadFile = File(...), carModel: str = Form(...)):
            content = (await file.read()).decode()
            lines = [line for line in content.splitlines() if line.strip()]
            if not lines:
                return {"success": False, "message": "The uploaded file is empty."}
            for line in lines:
                work_datetime, product_name, quantity = line.split(",")
                backend.seed(
                    work_datetime, carModel, productName=product_name, quantity=int(quantity)
                )
            return RedirectResponse("/worklogs", status_code=302)

        @app.get("/api/sse/subscribe")
        async def subscribe() -> StreamingResponse:
            async def replay():
                yield "event: connect\ndata: SSE connection established\n\n"
                for message in list(backend.events):
                    yield message

            return StreamingResponse(
                replay(),
                media_type="text/event-stream",
                headers={"Cache-Control": "no-cache"},
            )

        return app


def _write_fields(body: dict) -> dict:
    """Writable columns of a create/update body."""
    return {
        "workDatetime": body["workDatetime"],
        "carModel": body["carModel"],
        "productColor": body.get("productColor"),
        "productCode": body.get("productCode"),
        "productName": body.get("productName"),
        "quantity": body.get("quantity") or 0,
    }
