class PipelineError(Exception):
    """Base for failures the learner is expected to see."""

    status_code = 400

    def __init__(self, message, **details):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        payload = {"error": self.message}
        payload.update(self.details)
        return payload


class ValidationError(PipelineError):
    status_code = 400


class InvalidAttempt(PipelineError):
    status_code = 404

    def __init__(self, message="Invalid attempt", **details):
        super().__init__(message, **details)


class AlreadySubmitted(PipelineError):
    status_code = 409

    def __init__(self, message="Quiz already submitted", **details):
        super().__init__(message, **details)
