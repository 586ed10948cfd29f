"""Aggregation of recorded attempts into per-question result statistics."""

from __future__ import annotations

from quiz_portal.core.models import QuestionStats, Quiz, QuizResultStats, StudentAttempt


def build_result_stats(quiz: Quiz, attempts: list[StudentAttempt]) -> QuizResultStats:
    """Group the snapshotted answers of ``attempts`` by the quiz's current questions.

    Answers to questions that were removed by a later edit are left out of the
    per-question view but stay on their attempts.
    """
    stats: dict[str, QuestionStats] = {
        question.id: QuestionStats(
            question_id=question.id,
            option_counts=[0] * len(question.options),
        )
        for question in quiz.questions
    }

    for attempt in attempts:
        for answer in attempt.answers:
            entry = stats.get(answer.question_id)
            if entry is None:
                continue
            entry.answers.append(answer)
            if 0 <= answer.selected_option_index < len(entry.option_counts):
                entry.option_counts[answer.selected_option_index] += 1
            if answer.is_correct:
                entry.correct_count += 1

    return QuizResultStats(
        quiz_id=quiz.id,
        attempts=list(attempts),
        questions=[stats[question.id] for question in quiz.questions],
    )
