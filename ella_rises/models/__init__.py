from .event import EventDefinition, EventDefinitionCreate, EventDefinitionUpdate
from .event_instance import EventInstance, InstanceCreate, InstanceUpdate
from .participant import Participant, ParticipantCreate, ParticipantUpdate
from .registration import Registration, SurveyResponse

__all__ = [
    "EventDefinition",
    "EventDefinitionCreate",
    "EventDefinitionUpdate",
    "EventInstance",
    "InstanceCreate",
    "InstanceUpdate",
    "Participant",
    "ParticipantCreate",
    "ParticipantUpdate",
    "Registration",
    "SurveyResponse",
]
