"""Error types raised by the job services"""


class JobTrackerError(Exception):
    """Base class for job tracker failures"""


class JobValidationError(JobTrackerError):
    """Invalid manual input; nothing was changed"""


class JobNotFoundError(JobTrackerError):
    def __init__(self, job_id: str):
        super().__init__(f"Job not found: {job_id}")
        self.job_id = job_id


class SpreadsheetParseError(JobTrackerError):
    """Spreadsheet could not be read; nothing was imported"""


class StorageError(JobTrackerError):
    """Reading or writing persisted jobs failed"""
