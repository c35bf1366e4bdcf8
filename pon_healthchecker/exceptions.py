"""
Custom exceptions for PON-HEALTHCHECKER library
"""


class HealthCheckerException(Exception):
    """Base exception for pon-healthchecker library"""
    pass


class RegistrationError(HealthCheckerException):
    """Metric series could not be registered"""
    
    def __init__(self, name: str, message: str):
        self.name = name
        super().__init__(f"Failed to register metric {name}: {message}")


class ExtractionError(HealthCheckerException):
    """Device page could not be read or did not have the expected layout"""
    
    def __init__(self, source: str, message: str):
        self.source = source
        super().__init__(f"Extraction error for {source}: {message}")


class SchedulerError(HealthCheckerException):
    """Invalid scheduler state transition"""
    pass


class ValidationError(HealthCheckerException):
    """Input validation error"""
    pass
