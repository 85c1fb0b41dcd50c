import tempfile
import textwrap
import unittest
from datetime import datetime, timedelta, timezone
from pathlib import Path

from nagger.tasks import (
    Completion,
    Task,
    TaskBuilder,
    TaskImportance,
    TaskStatus,
    TaskStatusError,
    load_tasks,
)


class CompletionTests(unittest.TestCase):
    def test_bounds(self):
        with self.assertRaises(ValueError):
            Completion(101)
        with self.assertRaises(ValueError):
            Completion(-1)

    def test_saturating_arithmetic(self):
        self.assertEqual(Completion(70) + Completion(50), Completion.full())
        self.assertEqual(Completion(20) - Completion(50), Completion.zero())
        self.assertEqual(str(Completion(40)), "40%")
        self.assertTrue(Completion.full().is_complete)


class TaskTests(unittest.TestCase):
    def test_importance_ordering(self):
        self.assertGreater(TaskImportance.CRITICAL, TaskImportance.IMPORTANT)
        self.assertGreater(TaskImportance.NORMAL, TaskImportance.CASUAL)

    def test_builder(self):
        deadline = datetime.now(timezone.utc) + timedelta(days=10)
        task = (
            TaskBuilder()
            .with_name("test")
            .with_deadline(deadline)
            .with_importance(TaskImportance.CRITICAL)
            .with_status(TaskStatus.ON_HOLD)
            .add_subtask(TaskBuilder().with_name("child"))
            .build()
        )
        self.assertEqual(task.name, "test")
        self.assertEqual(task.deadline, deadline)
        self.assertEqual(task.importance, TaskImportance.CRITICAL)
        self.assertEqual(task.status, TaskStatus.ON_HOLD)
        self.assertEqual([sub.name for sub in task.subtasks], ["child"])

    def test_defaults(self):
        task = TaskBuilder().build()
        self.assertEqual(task.name, "new task...")
        self.assertEqual(task.importance, TaskImportance.NORMAL)
        self.assertEqual(task.status, TaskStatus.IN_PROGRESS)
        self.assertNotEqual(task.id, Task().id)

    def test_completion_from_notes(self):
        task = Task()
        task.add_note("", 40)
        task.add_note("no percentage")
        self.assertEqual(task.completion(), Completion(40))

    def test_completion_averages_subtasks(self):
        parent = Task(name="parent", subtasks=[Task(name="a"), Task(name="b")])
        parent.add_note("started", 30)
        parent.subtasks[0].add_note("half", 50)
        parent.subtasks[1].complete()

        self.assertEqual(parent.completion(), Completion((30 + 50 + 100) // 3))
        count, parts = parent.completion_breakdown()
        self.assertEqual(count, 3)
        self.assertEqual(
            parts,
            [("notes_only", Completion(30)), ("a", Completion(50)), ("b", Completion(100))],
        )

    def test_completed_task_reports_full(self):
        task = Task()
        task.complete()
        self.assertEqual(task.completion(), Completion.full())

    def test_pause_and_resume(self):
        task = Task(subtasks=[Task(name="child")])
        task.pause()
        self.assertEqual(task.status, TaskStatus.ON_HOLD)
        self.assertEqual(task.subtasks[0].status, TaskStatus.ON_HOLD)
        with self.assertRaises(TaskStatusError):
            task.pause()
        task.resume()
        self.assertEqual(task.status, TaskStatus.IN_PROGRESS)
        self.assertEqual(task.subtasks[0].status, TaskStatus.IN_PROGRESS)
        task.resume()

    def test_resume_skips_completed_subtasks(self):
        done = Task(name="done", status=TaskStatus.COMPLETED)
        task = Task(status=TaskStatus.ON_HOLD, subtasks=[done])
        task.resume()
        self.assertEqual(done.status, TaskStatus.COMPLETED)

    def test_completed_task_cannot_resume_or_complete_again(self):
        task = Task()
        task.complete()
        with self.assertRaises(TaskStatusError):
            task.resume()
        with self.assertRaises(TaskStatusError):
            task.complete()

    def test_restart_clears_note_percentages(self):
        task = Task(subtasks=[Task(name="child")])
        task.add_note("progress", 60)
        task.complete()
        task.restart()
        self.assertEqual(task.status, TaskStatus.IN_PROGRESS)
        self.assertEqual(task.subtasks[0].status, TaskStatus.IN_PROGRESS)
        self.assertEqual(len(task.notes), 1)
        self.assertIsNone(task.notes[0].completed)
        with self.assertRaises(TaskStatusError):
            task.restart()

    def test_reset_drops_notes(self):
        task = Task(subtasks=[Task(name="child")])
        task.subtasks[0].add_note("x", 10)
        task.add_note("y", 20)
        task.complete()
        task.reset()
        self.assertEqual(task.notes, [])
        self.assertEqual(task.subtasks[0].notes, [])
        self.assertEqual(task.status, TaskStatus.IN_PROGRESS)

    def test_change_importance(self):
        task = Task()
        self.assertIsNone(task.change_importance(TaskImportance.NORMAL))
        self.assertEqual(task.change_importance(TaskImportance.CRITICAL), TaskImportance.NORMAL)

    def test_deadline_changes(self):
        task = Task()
        first = datetime(2026, 1, 1, tzinfo=timezone.utc)
        self.assertIsNone(task.extend_deadline(timedelta(days=1)))
        self.assertIsNone(task.change_deadline(first))
        self.assertEqual(task.extend_deadline(timedelta(days=1)), first)
        self.assertEqual(task.deadline, first + timedelta(days=1))
        self.assertEqual(task.remove_deadline(), first + timedelta(days=1))
        self.assertIsNone(task.deadline)

    def test_walk_is_depth_first(self):
        task = Task(
            name="root",
            subtasks=[Task(name="a", subtasks=[Task(name="a1")]), Task(name="b")],
        )
        self.assertEqual([node.name for node in task.walk()], ["root", "a", "a1", "b"])


class LoadTasksTests(unittest.TestCase):
    def test_loads_nested_tree(self):
        content = textwrap.dedent(
            """
            - name: thesis
              deadline: "2026-12-01T09:00:00+00:00"
              importance: critical
              notes:
                - text: outline
                  percent: 20
                - just a thought
              subtasks:
                - name: chapter 1
                  status: completed
            """
        )
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "tasks.yaml"
            path.write_text(content, encoding="utf-8")
            tasks = load_tasks(path)

        self.assertEqual(len(tasks), 1)
        thesis = tasks[0]
        self.assertEqual(thesis.importance, TaskImportance.CRITICAL)
        self.assertEqual(thesis.deadline, datetime(2026, 12, 1, 9, tzinfo=timezone.utc))
        self.assertEqual(len(thesis.notes), 2)
        self.assertEqual(thesis.subtasks[0].status, TaskStatus.COMPLETED)
        self.assertEqual(thesis.completion(), Completion((20 + 100) // 2))

    def test_rejects_unknown_importance(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "tasks.yaml"
            path.write_text("- name: x\n  importance: urgent\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_tasks(path)

    def test_rejects_malformed_note(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "tasks.yaml"
            path.write_text("- name: x\n  notes:\n    - 5\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_tasks(path)


if __name__ == "__main__":
    unittest.main()
