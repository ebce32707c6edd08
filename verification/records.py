"""
In-memory verification record for the freelancer wizard.

The record is the aggregate root the wizard edits.  It has no Django
dependencies so the controller, gate and scoring logic can be exercised
without a request cycle.  Between requests the record is carried in the
session as the JSON-safe dict produced by ``to_dict``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Union

from .attachments import AttachmentHandle


class VerificationStatus(str, Enum):
    PENDING = 'pending'
    IN_PROGRESS = 'in_progress'
    UNDER_REVIEW = 'under_review'
    APPROVED = 'approved'
    REJECTED = 'rejected'


# Statuses in which the wizard may still mutate the record.
EDITABLE_STATUSES = frozenset({VerificationStatus.PENDING, VerificationStatus.IN_PROGRESS})


class AccountType(str, Enum):
    FREELANCER = 'freelancer'
    CLIENT = 'client'


class Availability(str, Enum):
    FULL_TIME = 'full_time'
    PART_TIME = 'part_time'
    WEEKENDS = 'weekends'


class Proficiency(str, Enum):
    BASIC = 'basic'
    INTERMEDIATE = 'intermediate'
    ADVANCED = 'advanced'
    NATIVE = 'native'


SPECIALIZATIONS = [
    'Programming, website and application development',
    'Graphic Design and Visual Identity',
    'Digital Marketing and Social Media',
    'Content Writing and Translation',
    'Video and Audio Editing',
    'Business Consulting',
    'Data Analysis and Research',
    'Photography and Videography',
    'UI/UX Design',
    'Mobile App Development',
]

SUGGESTED_SKILLS = [
    'Python', 'User Interface Design', 'Psychology', 'Product label design',
    'Interior design', 'jQuery', 'E-marketing', 'Troubleshooting',
    'Create a landing page', 'Startup Consulting', 'Facebook marketing',
    'Video editing', 'Flyer design', 'Proofreading', 'Content rewriting',
]

PORTFOLIO_SLOTS = 3
DEFAULT_HOURLY_RATE = 50
DEFAULT_LANGUAGE = 'Arabic'

Answer = Union[str, frozenset]


def default_username(full_name: Optional[str]) -> str:
    """Derive the suggested username from the account holder's name."""
    if not full_name:
        return ''
    return '_'.join(full_name.split()).lower()


def normalize_skills(skills) -> List[str]:
    """Strip, drop blanks and de-duplicate while keeping first-seen order."""
    seen = []
    for skill in skills or []:
        cleaned = (skill or '').strip()
        if cleaned and cleaned not in seen:
            seen.append(cleaned)
    return seen


# =============================================================================
# Sub-records
# =============================================================================

@dataclass
class AccountData:
    username: str = ''
    account_type: AccountType = AccountType.FREELANCER
    terms_accepted: bool = False
    privacy_accepted: bool = False
    username_locked: bool = False

    def to_dict(self) -> Dict:
        return {
            'username': self.username,
            'account_type': self.account_type.value,
            'terms_accepted': self.terms_accepted,
            'privacy_accepted': self.privacy_accepted,
            'username_locked': self.username_locked,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'AccountData':
        return cls(
            username=data.get('username', ''),
            account_type=AccountType(data.get('account_type', AccountType.FREELANCER.value)),
            terms_accepted=bool(data.get('terms_accepted', False)),
            privacy_accepted=bool(data.get('privacy_accepted', False)),
            username_locked=bool(data.get('username_locked', False)),
        )


@dataclass
class LanguageEntry:
    language: str
    proficiency: Proficiency = Proficiency.NATIVE

    def to_dict(self) -> Dict:
        return {'language': self.language, 'proficiency': self.proficiency.value}

    @classmethod
    def from_dict(cls, data: Dict) -> 'LanguageEntry':
        return cls(
            language=data['language'],
            proficiency=Proficiency(data.get('proficiency', Proficiency.NATIVE.value)),
        )


@dataclass
class ProfileData:
    job_title: str = ''
    specialization: str = ''
    introduction: str = ''
    skills: List[str] = field(default_factory=list)
    hourly_rate: float = DEFAULT_HOURLY_RATE
    availability: Availability = Availability.FULL_TIME
    languages: List[LanguageEntry] = field(
        default_factory=lambda: [LanguageEntry(DEFAULT_LANGUAGE, Proficiency.NATIVE)]
    )

    def to_dict(self) -> Dict:
        return {
            'job_title': self.job_title,
            'specialization': self.specialization,
            'introduction': self.introduction,
            'skills': list(self.skills),
            'hourly_rate': self.hourly_rate,
            'availability': self.availability.value,
            'languages': [entry.to_dict() for entry in self.languages],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'ProfileData':
        profile = cls(
            job_title=data.get('job_title', ''),
            specialization=data.get('specialization', ''),
            introduction=data.get('introduction', ''),
            skills=normalize_skills(data.get('skills')),
            hourly_rate=data.get('hourly_rate', DEFAULT_HOURLY_RATE),
            availability=Availability(data.get('availability', Availability.FULL_TIME.value)),
        )
        if 'languages' in data:
            profile.languages = [LanguageEntry.from_dict(e) for e in data['languages']]
        return profile


@dataclass
class PortfolioItem:
    id: str
    title: str = ''
    description: str = ''
    thumbnail: Optional[AttachmentHandle] = None
    images: List[AttachmentHandle] = field(default_factory=list)
    project_url: str = ''
    skills: List[str] = field(default_factory=list)

    @property
    def is_filled(self) -> bool:
        return bool(self.title and self.description and self.thumbnail)

    def attachments(self) -> List[AttachmentHandle]:
        handles = list(self.images)
        if self.thumbnail is not None:
            handles.insert(0, self.thumbnail)
        return handles

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'title': self.title,
            'description': self.description,
            'thumbnail': self.thumbnail.to_dict() if self.thumbnail else None,
            'images': [h.to_dict() for h in self.images],
            'project_url': self.project_url,
            'skills': list(self.skills),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'PortfolioItem':
        thumbnail = data.get('thumbnail')
        return cls(
            id=str(data['id']),
            title=data.get('title', ''),
            description=data.get('description', ''),
            thumbnail=AttachmentHandle.from_dict(thumbnail) if thumbnail else None,
            images=[AttachmentHandle.from_dict(h) for h in data.get('images', [])],
            project_url=data.get('project_url', ''),
            skills=normalize_skills(data.get('skills')),
        )


@dataclass
class Testimonial:
    client_name: str
    rating: int
    comment: str = ''
    project_title: str = ''
    client_company: str = ''

    def __post_init__(self):
        if not 1 <= int(self.rating) <= 5:
            raise ValueError(f"Testimonial rating must be between 1 and 5, got {self.rating}")
        self.rating = int(self.rating)

    def to_dict(self) -> Dict:
        return {
            'client_name': self.client_name,
            'client_company': self.client_company,
            'rating': self.rating,
            'comment': self.comment,
            'project_title': self.project_title,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'Testimonial':
        return cls(
            client_name=data['client_name'],
            rating=data['rating'],
            comment=data.get('comment', ''),
            project_title=data.get('project_title', ''),
            client_company=data.get('client_company', ''),
        )


def _empty_slots() -> List[PortfolioItem]:
    return [PortfolioItem(id=str(i + 1)) for i in range(PORTFOLIO_SLOTS)]


@dataclass
class BusinessGallery:
    portfolio_items: List[PortfolioItem] = field(default_factory=_empty_slots)
    certificates: List[AttachmentHandle] = field(default_factory=list)
    testimonials: List[Testimonial] = field(default_factory=list)

    def attachments(self) -> List[AttachmentHandle]:
        handles = []
        for item in self.portfolio_items:
            handles.extend(item.attachments())
        handles.extend(self.certificates)
        return handles

    def to_dict(self) -> Dict:
        return {
            'portfolio_items': [item.to_dict() for item in self.portfolio_items],
            'certificates': [h.to_dict() for h in self.certificates],
            'testimonials': [t.to_dict() for t in self.testimonials],
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'BusinessGallery':
        items = [PortfolioItem.from_dict(i) for i in data.get('portfolio_items', [])]
        if len(items) != PORTFOLIO_SLOTS:
            raise ValueError(f"Business gallery must have exactly {PORTFOLIO_SLOTS} portfolio slots")
        return cls(
            portfolio_items=items,
            certificates=[AttachmentHandle.from_dict(h) for h in data.get('certificates', [])],
            testimonials=[Testimonial.from_dict(t) for t in data.get('testimonials', [])],
        )


@dataclass
class AdmissionTest:
    completed: bool = False
    score: Optional[int] = None
    answers: Dict[str, Answer] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        answers = {}
        for question_id, answer in self.answers.items():
            answers[question_id] = answer if isinstance(answer, str) else sorted(answer)
        return {'completed': self.completed, 'score': self.score, 'answers': answers}

    @classmethod
    def from_dict(cls, data: Dict) -> 'AdmissionTest':
        answers = {}
        for question_id, answer in (data.get('answers') or {}).items():
            answers[question_id] = answer if isinstance(answer, str) else frozenset(answer)
        return cls(
            completed=bool(data.get('completed', False)),
            score=data.get('score'),
            answers=answers,
        )


# =============================================================================
# Aggregate root
# =============================================================================

FIRST_STEP = 1
LAST_STEP = 4


@dataclass
class VerificationRecord:
    user_id: str
    current_step: int = FIRST_STEP
    status: VerificationStatus = VerificationStatus.PENDING
    account_data: AccountData = field(default_factory=AccountData)
    profile: ProfileData = field(default_factory=ProfileData)
    business_gallery: BusinessGallery = field(default_factory=BusinessGallery)
    admission_test: AdmissionTest = field(default_factory=AdmissionTest)
    submitted_at: Optional[datetime] = None
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    dirty_steps: set = field(default_factory=set)

    @classmethod
    def start(cls, user_id, full_name: Optional[str] = None) -> 'VerificationRecord':
        """Default-populated record for a user opening the wizard."""
        return cls(
            user_id=str(user_id),
            account_data=AccountData(username=default_username(full_name)),
        )

    @property
    def is_editable(self) -> bool:
        return self.status in EDITABLE_STATUSES

    def sub_record(self, key: str):
        return getattr(self, key)

    def attachments(self) -> List[AttachmentHandle]:
        return self.business_gallery.attachments()

    def consume_dirty(self) -> set:
        """Sub-record names edited since the last render.  Clears the marks."""
        dirty, self.dirty_steps = self.dirty_steps, set()
        return dirty

    def to_dict(self) -> Dict:
        return {
            'user_id': self.user_id,
            'current_step': self.current_step,
            'status': self.status.value,
            'steps': {
                'account_data': self.account_data.to_dict(),
                'profile': self.profile.to_dict(),
                'business_gallery': self.business_gallery.to_dict(),
                'admission_test': self.admission_test.to_dict(),
            },
            'submitted_at': self.submitted_at.isoformat() if self.submitted_at else None,
            'reviewed_at': self.reviewed_at.isoformat() if self.reviewed_at else None,
            'reviewed_by': self.reviewed_by,
            'rejection_reason': self.rejection_reason,
            'dirty_steps': sorted(self.dirty_steps),
        }

    @classmethod
    def from_dict(cls, data: Dict) -> 'VerificationRecord':
        steps = data.get('steps', {})
        current_step = int(data.get('current_step', FIRST_STEP))
        if not FIRST_STEP <= current_step <= LAST_STEP:
            raise ValueError(f"current_step out of range: {current_step}")
        return cls(
            user_id=str(data['user_id']),
            current_step=current_step,
            status=VerificationStatus(data.get('status', VerificationStatus.PENDING.value)),
            account_data=AccountData.from_dict(steps.get('account_data', {})),
            profile=ProfileData.from_dict(steps.get('profile', {})),
            business_gallery=(
                BusinessGallery.from_dict(steps['business_gallery'])
                if 'business_gallery' in steps else BusinessGallery()
            ),
            admission_test=AdmissionTest.from_dict(steps.get('admission_test', {})),
            submitted_at=_parse_dt(data.get('submitted_at')),
            reviewed_at=_parse_dt(data.get('reviewed_at')),
            reviewed_by=data.get('reviewed_by'),
            rejection_reason=data.get('rejection_reason'),
            dirty_steps=set(data.get('dirty_steps', [])),
        )


def _parse_dt(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None
