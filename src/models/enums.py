"""Enum definitions for the extraction schema and error taxonomy."""

from enum import Enum


class Confidence(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class BigPictureType(str, Enum):
    GOAL = "goal"
    CONSTRAINT = "constraint"
    UNCERTAINTY = "uncertainty"


class IterationStatus(str, Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    UNRESOLVED = "unresolved"


class BulletStatus(str, Enum):
    DRAFT_READY = "draft-ready"
    NEEDS_CLARIFICATION = "needs-clarification"


class ModelKey(str, Enum):
    OPENAI = "openai"
    CLAUDE = "claude"
    GEMINI = "gemini"


class Bucket(str, Enum):
    CANDIDATE_PROJECTS = "candidate_projects"
    BIG_PICTURE = "big_picture"
    WORK_PERFORMED = "work_performed"
    ITERATIONS = "iterations"
    DRAFTING_MATERIAL = "drafting_material"


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    UNAUTHENTICATED = "Unauthenticated"
    UPSTREAM = "UpstreamError"
    RATE_LIMITED = "RateLimited"
    PAYMENT_REQUIRED = "PaymentRequired"
    PARSE_FAILURE = "ParseFailure"
    PERSISTENCE = "PersistenceError"
    TIMEOUT = "Timeout"
    CANCELLED = "Cancelled"
