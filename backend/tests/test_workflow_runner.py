"""
Staged workflow runner and runner loading.
"""

import pytest

from autoreel.workflow.base import StagedWorkflowRunner, WorkflowRunner
from autoreel.workflow.errors import WorkflowRunnerError
from autoreel.workflow.loader import UnconfiguredWorkflowRunner, import_attr, load_runner
from autoreel.workflow.models import QualitySummary, TriggerType, VideoArtifact
from autoreel.workflow.stages import STAGE_CATALOG


class RecordingListener:
    def __init__(self):
        self.events = []

    def stage_started(self, stage):
        self.events.append(("started", stage))

    def stage_completed(self, stage):
        self.events.append(("completed", stage))


def _full_pipeline():
    def research(ctx):
        ctx.add_cost("llm", 0.12)
        return ["topic a", "topic b"]

    def select(ctx):
        return ctx.outputs["trend_research"][0]

    def script(ctx):
        ctx.add_cost("llm", 0.30)
        return f"Script about {ctx.outputs['topic_selection']}"

    def thumbnail(ctx):
        ctx.record_error("thumbnail", "fallback template used")

    def quality(ctx):
        ctx.quality = QualitySummary(scores={"script": 8.0}, overall=8.0)

    def upload(ctx):
        ctx.video = VideoArtifact(url="https://youtu.be/xyz", duration_seconds=45.0)

    handlers = {stage: (lambda ctx: None) for stage in STAGE_CATALOG}
    handlers.update(
        trend_research=research,
        topic_selection=select,
        script_generation=script,
        quality_check=quality,
        thumbnail=thumbnail,
        upload=upload,
    )
    return handlers


class TestStagedWorkflowRunner:

    def test_runs_all_stages_in_catalog_order(self):
        runner = StagedWorkflowRunner(_full_pipeline())
        listener = RecordingListener()

        result = runner.execute_manual(listener=listener)

        assert result.completed_stages == list(STAGE_CATALOG)
        assert result.current_stage == "upload"
        assert result.costs.total == pytest.approx(0.42)
        assert result.costs.breakdown == {"llm": pytest.approx(0.42)}
        assert result.quality.overall == 8.0
        assert result.video.url == "https://youtu.be/xyz"
        assert [(e.node, e.error) for e in result.errors] == [
            ("thumbnail", "fallback template used")
        ]
        assert listener.events[:2] == [
            ("started", "trend_research"),
            ("completed", "trend_research"),
        ]
        assert len(listener.events) == 2 * len(STAGE_CATALOG)

    def test_handlers_registered_out_of_order_still_run_in_order(self):
        seen = []
        runner = StagedWorkflowRunner({
            "upload": lambda ctx: seen.append("upload"),
            "voiceover": lambda ctx: seen.append("voiceover"),
        })

        result = runner.execute_scheduled()

        assert seen == ["voiceover", "upload"]
        assert result.completed_stages == ["voiceover", "upload"]

    def test_stage_exception_fails_run_with_stage(self):
        def render(ctx):
            raise TimeoutError("render timeout")

        runner = StagedWorkflowRunner({
            "voiceover": lambda ctx: None,
            "video_render": render,
            "upload": lambda ctx: pytest.fail("upload must not run"),
        })
        listener = RecordingListener()

        with pytest.raises(WorkflowRunnerError) as exc_info:
            runner.execute_manual(listener=listener)

        assert exc_info.value.stage == "video_render"
        assert exc_info.value.message == "render timeout"
        assert exc_info.value.code == "RunnerFailure"
        assert ("completed", "video_render") not in listener.events

    def test_runner_error_without_stage_gets_stage(self):
        def upload(ctx):
            raise WorkflowRunnerError("quota exceeded")

        runner = StagedWorkflowRunner({"upload": upload})

        with pytest.raises(WorkflowRunnerError) as exc_info:
            runner.execute_manual()
        assert exc_info.value.stage == "upload"

    def test_listener_failure_does_not_fail_run(self):
        class BrokenListener:
            def stage_started(self, stage):
                raise RuntimeError("listener down")

            def stage_completed(self, stage):
                raise RuntimeError("listener down")

        runner = StagedWorkflowRunner({"voiceover": lambda ctx: "audio.mp3"})

        result = runner.execute_manual(listener=BrokenListener())
        assert result.completed_stages == ["voiceover"]

    def test_unknown_stage_rejected(self):
        with pytest.raises(ValueError, match="Unknown stage"):
            StagedWorkflowRunner({"teleport": lambda ctx: None})

    def test_execute_dispatches_on_trigger(self):
        class Recording(WorkflowRunner):
            def __init__(self):
                self.called = []

            def execute_manual(self, listener=None):
                self.called.append("manual")

            def execute_scheduled(self, listener=None):
                self.called.append("scheduled")

        runner = Recording()
        runner.execute(TriggerType.MANUAL)
        runner.execute(TriggerType.SCHEDULED)
        assert runner.called == ["manual", "scheduled"]


# Targets for load_runner
PIPELINE_RUNNER = StagedWorkflowRunner({"upload": lambda ctx: None})


def build_pipeline_runner():
    return StagedWorkflowRunner({"voiceover": lambda ctx: None})


NOT_A_RUNNER = 42


class TestLoadRunner:

    def test_unconfigured_runner_fails_runs(self):
        runner = load_runner(None)

        assert isinstance(runner, UnconfiguredWorkflowRunner)
        with pytest.raises(WorkflowRunnerError, match="No workflow runner configured"):
            runner.execute_manual()
        with pytest.raises(WorkflowRunnerError):
            runner.execute_scheduled()

    def test_load_instance(self):
        assert load_runner(f"{__name__}:PIPELINE_RUNNER") is PIPELINE_RUNNER

    def test_load_factory(self):
        runner = load_runner(f"{__name__}:build_pipeline_runner")
        assert runner.stages == ["voiceover"]

    def test_load_class(self):
        runner = load_runner("autoreel.workflow.loader:UnconfiguredWorkflowRunner")
        assert isinstance(runner, UnconfiguredWorkflowRunner)

    def test_non_runner_rejected(self):
        with pytest.raises(TypeError, match="did not produce a WorkflowRunner"):
            load_runner(f"{__name__}:NOT_A_RUNNER")

    def test_bad_path_format(self):
        with pytest.raises(ValueError, match="expected 'module:attr'"):
            import_attr("autoreel.workflow.loader")

    def test_dotted_attribute(self):
        assert import_attr("autoreel.workflow.loader:UnconfiguredWorkflowRunner.MESSAGE") == (
            "No workflow runner configured"
        )
