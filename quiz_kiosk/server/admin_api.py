"""FastAPI server that exposes the administrator endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from threading import Thread

from fastapi import Depends, FastAPI, HTTPException, Response
from pydantic import BaseModel
import uvicorn

from quiz_kiosk.constants.about import APP_NAME, APP_VERSION
from quiz_kiosk.constants.kiosk_constants import (
    DEFAULT_QUESTIONS_PER_ATTEMPT,
    DEFAULT_SECONDS_PER_QUESTION,
)
from quiz_kiosk.constants.network_constants import DEFAULT_ADMIN_HOST, DEFAULT_ADMIN_PORT
from quiz_kiosk.core.identity import RegistrationError, RegistrationForm, validate_registration
from quiz_kiosk.core.markdown_renderer import renderer
from quiz_kiosk.core.models import AttemptStatus, QuizDraft
from quiz_kiosk.core.question_catalog import QuestionCatalog
from quiz_kiosk.core.results_exporter import (
    UNKNOWN_QUIZ_LABEL,
    filter_attempts,
    filter_participants,
    render_attempts_csv,
)
from quiz_kiosk.core.services.state_store import (
    AdminStateStore,
    QuizValidationError,
    RecordNotFoundError,
)

logger = logging.getLogger(__name__)


class ParticipantPayload(BaseModel):
    """Payload schema for registering a participant from the console."""

    name: str
    phone: str
    class_name: str


class ParticipantUpdatePayload(BaseModel):
    name: str | None = None
    phone: str | None = None
    class_name: str | None = None


class QuizPayload(BaseModel):
    """Payload schema for creating or replacing a quiz definition."""

    title: str
    description: str = ""
    question_ids: list[int]
    seconds_per_question: int = DEFAULT_SECONDS_PER_QUESTION
    questions_per_attempt: int = DEFAULT_QUESTIONS_PER_ATTEMPT
    allow_retake: bool = True
    is_active: bool = False

    def to_draft(self) -> QuizDraft:
        return QuizDraft(
            title=self.title,
            description=self.description,
            question_pool=tuple(self.question_ids),
            seconds_per_question=self.seconds_per_question,
            questions_per_attempt=self.questions_per_attempt,
            allow_retake=self.allow_retake,
            is_active=self.is_active,
        )


def _get_store_dependency(store: AdminStateStore):
    def dependency() -> AdminStateStore:
        return store

    return dependency


def create_admin_app(store: AdminStateStore, catalog: QuestionCatalog) -> FastAPI:
    """Create a FastAPI application wired to the provided state store."""
    app = FastAPI(title=f"{APP_NAME} Admin API", version=APP_VERSION)
    store_dep = _get_store_dependency(store)

    # --- Overview ---

    @app.get("/state")
    def get_state(admin: AdminStateStore = Depends(store_dep)) -> dict[str, object]:
        state = admin.get_state()
        return {
            "revision": admin.revision,
            "activeQuizId": state.active_quiz_id,
            "participants": len(state.participants),
            "quizzes": len(state.quizzes),
            "attempts": len(state.attempts),
        }

    @app.get("/changes")
    def get_changes(since: int = 0, admin: AdminStateStore = Depends(store_dep)) -> dict[str, object]:
        revision = admin.revision
        return {"revision": revision, "changed": revision != since}

    @app.get("/questions")
    def list_questions() -> list[dict[str, object]]:
        return [
            {
                "id": question.id,
                "category": question.category,
                "text": question.text,
                "options": list(question.options),
                "correctOption": question.correct_option_index,
            }
            for question in catalog
        ]

    # --- Participants ---

    @app.get("/participants")
    def list_participants(
        search: str = "",
        admin: AdminStateStore = Depends(store_dep),
    ) -> list[dict[str, object]]:
        participants = filter_participants(admin.get_state().participants, search)
        return [participant.to_dict() for participant in participants]

    @app.post("/participants", status_code=201)
    def create_participant(
        payload: ParticipantPayload,
        admin: AdminStateStore = Depends(store_dep),
    ) -> dict[str, object]:
        try:
            form = validate_registration(
                RegistrationForm(name=payload.name, phone=payload.phone, class_name=payload.class_name)
            )
        except RegistrationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        if admin.find_participant_by_phone(form.phone) is not None:
            raise HTTPException(status_code=409, detail="A participant with this phone number already exists.")
        participant = admin.add_participant(form.name, form.phone, form.class_name)
        return participant.to_dict()

    @app.patch("/participants/{participant_id}")
    def update_participant(
        participant_id: str,
        payload: ParticipantUpdatePayload,
        admin: AdminStateStore = Depends(store_dep),
    ) -> dict[str, object]:
        existing = admin.get_state().find_participant(participant_id)
        if existing is None:
            raise HTTPException(status_code=404, detail=f"Unknown participant '{participant_id}'.")
        try:
            form = validate_registration(
                RegistrationForm(
                    name=payload.name if payload.name is not None else existing.name,
                    phone=payload.phone if payload.phone is not None else existing.phone,
                    class_name=payload.class_name if payload.class_name is not None else existing.class_name,
                )
            )
        except RegistrationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        if form.phone != existing.phone:
            holder = admin.find_participant_by_phone(form.phone)
            if holder is not None and holder.id != participant_id:
                raise HTTPException(status_code=409, detail="A participant with this phone number already exists.")
        try:
            updated = admin.update_participant(
                participant_id, name=form.name, phone=form.phone, class_name=form.class_name
            )
        except RecordNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return updated.to_dict()

    @app.get("/participants/{participant_id}/attempts")
    def list_participant_attempts(
        participant_id: str,
        admin: AdminStateStore = Depends(store_dep),
    ) -> list[dict[str, object]]:
        state = admin.get_state()
        if state.find_participant(participant_id) is None:
            raise HTTPException(status_code=404, detail=f"Unknown participant '{participant_id}'.")
        return [attempt.to_dict() for attempt in state.attempts_for_participant(participant_id)]

    @app.delete("/participants/{participant_id}", status_code=204)
    def delete_participant(participant_id: str, admin: AdminStateStore = Depends(store_dep)) -> Response:
        if not admin.delete_participant(participant_id):
            raise HTTPException(status_code=404, detail=f"Unknown participant '{participant_id}'.")
        return Response(status_code=204)

    # --- Quiz definitions ---

    @app.get("/quizzes")
    def list_quizzes(admin: AdminStateStore = Depends(store_dep)) -> list[dict[str, object]]:
        return [quiz.to_dict() for quiz in admin.get_state().quizzes]

    @app.post("/quizzes", status_code=201)
    def create_quiz(payload: QuizPayload, admin: AdminStateStore = Depends(store_dep)) -> dict[str, object]:
        try:
            quiz_id = admin.save_quiz_definition(payload.to_draft())
        except QuizValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return admin.get_state().find_quiz(quiz_id).to_dict()

    @app.put("/quizzes/{quiz_id}")
    def replace_quiz(
        quiz_id: str,
        payload: QuizPayload,
        admin: AdminStateStore = Depends(store_dep),
    ) -> dict[str, object]:
        try:
            admin.save_quiz_definition(payload.to_draft(), quiz_id=quiz_id)
        except QuizValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RecordNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return admin.get_state().find_quiz(quiz_id).to_dict()

    @app.delete("/quizzes/{quiz_id}", status_code=204)
    def delete_quiz(quiz_id: str, admin: AdminStateStore = Depends(store_dep)) -> Response:
        if not admin.delete_quiz_definition(quiz_id):
            raise HTTPException(status_code=404, detail=f"Unknown quiz '{quiz_id}'.")
        return Response(status_code=204)

    @app.post("/quizzes/{quiz_id}/activate")
    def activate_quiz(quiz_id: str, admin: AdminStateStore = Depends(store_dep)) -> dict[str, object]:
        try:
            admin.set_active_quiz(quiz_id)
        except RecordNotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        return {"activeQuizId": quiz_id, "revision": admin.revision}

    # --- Attempts ---

    @app.get("/attempts")
    def list_attempts(
        search: str = "",
        status: AttemptStatus | None = None,
        admin: AdminStateStore = Depends(store_dep),
    ) -> list[dict[str, object]]:
        state = admin.get_state()
        titles = {quiz.id: quiz.title for quiz in state.quizzes}
        return [
            {**attempt.to_dict(), "quizTitle": titles.get(attempt.quiz_id, UNKNOWN_QUIZ_LABEL)}
            for attempt in filter_attempts(state.attempts, search, status)
        ]

    @app.get("/attempts/export.csv")
    def export_attempts(
        search: str = "",
        status: AttemptStatus | None = None,
        admin: AdminStateStore = Depends(store_dep),
    ) -> Response:
        state = admin.get_state()
        titles = {quiz.id: quiz.title for quiz in state.quizzes}
        document = render_attempts_csv(filter_attempts(state.attempts, search, status), titles)
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
        return Response(
            content=document,
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="quiz-results-{stamp}.csv"'},
        )

    @app.get("/attempts/{attempt_id}")
    def get_attempt(attempt_id: str, admin: AdminStateStore = Depends(store_dep)) -> dict[str, object]:
        state = admin.get_state()
        attempt = state.find_attempt(attempt_id)
        if attempt is None:
            raise HTTPException(status_code=404, detail=f"Unknown attempt '{attempt_id}'.")
        quiz = state.find_quiz(attempt.quiz_id)
        review: list[dict[str, object]] = []
        for answer in attempt.answers:
            question = catalog.by_id(answer.question_id)
            if question is None:
                logger.warning("Attempt %s references unknown question %d", attempt_id, answer.question_id)
                continue
            review.append(
                {
                    "questionId": question.id,
                    "questionHtml": renderer.render_fragment(question.text),
                    "options": list(question.options),
                    "correctOption": question.correct_option_index,
                    "selectedOption": answer.selected_option_index,
                    "isCorrect": answer.is_correct,
                }
            )
        return {
            **attempt.to_dict(),
            "quizTitle": quiz.title if quiz is not None else UNKNOWN_QUIZ_LABEL,
            "review": review,
        }

    return app


def start_admin_server(
    store: AdminStateStore,
    catalog: QuestionCatalog,
    host: str = DEFAULT_ADMIN_HOST,
    port: int = DEFAULT_ADMIN_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_admin_app(store, catalog)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="QuizKioskAdminServer", daemon=True)
    thread.start()
    logger.info("Admin API listening on http://%s:%d", host, port)
    return thread
