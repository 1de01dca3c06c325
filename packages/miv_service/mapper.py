from packages.miv_dto.session import SessionResponseDTO, QuestionDTO
from packages.miv_session.dto import Question
from packages.miv_session.engine import InterviewSessionEngine
from packages.miv_session.policy import allotted_seconds


class SessionMapper:
    """
    Explicit Mapper to convert the session engine and its questions to DTOs.
    Ensures no domain objects leak into the API layer.
    """

    @staticmethod
    def question_to_dto(question: Question, index: int) -> QuestionDTO:
        return QuestionDTO(
            id=question.id,
            sequence_number=index + 1,
            prompt=question.prompt,
            difficulty=question.difficulty.value,
            time_limit_seconds=allotted_seconds(question.difficulty),
            is_placeholder=question.is_placeholder,
            answer=question.answer,
            score=question.score,
            feedback=question.feedback,
            time_spent=question.time_spent,
            submitted=question.is_submitted,
        )

    @staticmethod
    def to_dto(engine: InterviewSessionEngine) -> SessionResponseDTO:
        state = engine.state
        if state is None:
            return SessionResponseDTO(
                session_id=engine.session_id,
                stage=engine.stage.value,
                current_index=0,
                total_questions=engine.total_questions,
                time_remaining=0,
                is_paused=False,
                is_complete=False,
                progress_percentage=0.0,
                error=engine.last_error,
            )

        total = len(state.questions)
        progress = ((state.current_index + 1) / total * 100) if total > 0 else 0.0
        questions = [SessionMapper.question_to_dto(q, i) for i, q in enumerate(state.questions)]

        return SessionResponseDTO(
            session_id=engine.session_id,
            stage=engine.stage.value,
            current_index=state.current_index,
            total_questions=total,
            time_remaining=engine.time_remaining(),
            is_paused=state.is_paused,
            is_complete=state.is_complete,
            progress_percentage=round(progress, 1),
            current_question=questions[state.current_index],
            questions=questions,
            record_id=state.record_id,
            error=engine.last_error,
        )
