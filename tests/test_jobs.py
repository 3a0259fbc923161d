import pytest

from pdf_recolor.core.jobs import InvalidTransition, JobStore, RecolorJob
from pdf_recolor.models.schemas import InvertMode, JobState, RemapMode, RGBColor


def test_new_job_starts_with_file_selected(build_pdf):
    store = JobStore(max_jobs=5)
    job = store.create("input.pdf", build_pdf([b"0 g"]), InvertMode())

    assert job.state is JobState.file_selected
    assert job.progress == 0.0
    assert store.get(job.id) is job
    assert len(store) == 1


def test_run_moves_job_to_done(build_pdf, read_contents):
    store = JobStore(max_jobs=5)
    job = store.create("input.pdf", build_pdf([b"0 g", b"1 g"]), InvertMode())

    store.run(job.id)

    assert job.state is JobState.done
    assert job.progress == 1.0
    assert job.source is None
    assert job.stats.pages_rewritten == 2
    assert read_contents(job.result) == [b"1.000 g", b"0.000 g"]


def test_run_records_failure_without_raising(build_pdf):
    store = JobStore(max_jobs=5)
    job = store.create("input.pdf", build_pdf([b"0 g", b"(oops rg"]), InvertMode())

    store.run(job.id)

    assert job.state is JobState.failed
    assert job.result is None
    assert job.progress == 0.0
    assert "page 2" in job.error


def test_illegal_transitions_are_rejected():
    job = RecolorJob(id="abc", mode=InvertMode())

    with pytest.raises(InvalidTransition):
        job.transition(JobState.processing)
    with pytest.raises(InvalidTransition):
        job.transition(JobState.done)

    job.select_file("a.pdf", b"%PDF-")
    job.transition(JobState.processing)
    with pytest.raises(InvalidTransition):
        job.reset()
    with pytest.raises(InvalidTransition):
        job.select_file("b.pdf", b"%PDF-")


def test_reset_returns_to_idle_and_clears_data():
    job = RecolorJob(id="abc", mode=InvertMode())
    job.select_file("a.pdf", b"%PDF-")
    job.transition(JobState.processing)
    job.transition(JobState.done)
    job.result = b"%PDF-result"

    job.reset()

    assert job.state is JobState.idle
    assert job.result is None
    assert job.source is None
    assert job.progress == 0.0


def test_finished_job_accepts_a_new_file():
    job = RecolorJob(id="abc", mode=InvertMode())
    job.select_file("a.pdf", b"%PDF-")
    job.transition(JobState.processing)
    job.transition(JobState.failed)
    job.error = "boom"

    job.select_file("b.pdf", b"%PDF-2")

    assert job.state is JobState.file_selected
    assert job.filename == "b.pdf"
    assert job.error is None


def test_processing_job_cannot_be_deleted():
    store = JobStore(max_jobs=5)
    job = store.create("input.pdf", b"%PDF-", InvertMode())
    job.transition(JobState.processing)

    with pytest.raises(InvalidTransition):
        store.delete(job.id)
    assert store.get(job.id) is job


def test_oldest_finished_jobs_are_evicted(build_pdf):
    store = JobStore(max_jobs=2)
    source = build_pdf([b"0 g"])

    first = store.create("1.pdf", source, InvertMode())
    store.run(first.id)
    second = store.create("2.pdf", source, InvertMode())
    store.run(second.id)
    third = store.create("3.pdf", source, InvertMode())

    assert len(store) == 2
    assert store.get(first.id) is None
    assert store.get(second.id) is second
    assert store.get(third.id) is third


def test_output_filename_reflects_mode():
    remap = RemapMode(content_color=RGBColor(r=1, g=0, b=0), background_color=RGBColor(r=0, g=0, b=0))

    inverted = RecolorJob(id="a", mode=InvertMode(), filename="scan.pdf")
    recolored = RecolorJob(id="b", mode=remap, filename="scan.pdf")

    assert inverted.output_filename == "inverted-scan.pdf"
    assert recolored.output_filename == "recolored-scan.pdf"
