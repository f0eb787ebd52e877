from maxq.dialogs.prefs import format_env_lines, parse_env_lines
from maxq.models.job import Job, JobStatus
from maxq.models.status import STATUS_CONFIG, queue_summary, status_color, status_label


def _jobs(*statuses):
    jobs = []
    for i, status in enumerate(statuses):
        job = Job(source_path=f"C:/scenes/scene{i}.max")
        job.status = status
        jobs.append(job)
    return jobs


def test_every_status_has_a_label_and_color():
    for status in (JobStatus.PENDING, JobStatus.ACTIVE, JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELED):
        assert status in STATUS_CONFIG
    job = Job(source_path="a.max", status=JobStatus.ACTIVE)
    assert status_label(job) == "Rendering"
    assert status_color(job).startswith("#")


def test_idle_summary_counts_jobs():
    assert queue_summary(_jobs(JobStatus.PENDING, JobStatus.COMPLETED), running=False) == "Queue: 2 jobs loaded"


def test_running_summary_names_active_job():
    jobs = _jobs(JobStatus.COMPLETED, JobStatus.ACTIVE, JobStatus.PENDING, JobStatus.PENDING)
    assert queue_summary(jobs, running=True) == "Queue: 1/4 done • 2 left • Working on: scene1.max"


def test_env_lines_round_trip_ignores_noise():
    env = parse_env_lines("ADSK_FLAG=1\n# comment\n\nbroken\n PATH_X = C:/x=y \n")
    assert env == {"ADSK_FLAG": "1", "PATH_X": "C:/x=y"}
    assert parse_env_lines(format_env_lines(env)) == env
