"""Seed a local database with demo roles and entries in every workflow state.

Entries are driven through the workflow engine, so statuses and audit
fields come out exactly as they would through the API.

    python -m scripts.seed_demo_entries
"""
import asyncio
import sys

sys.path.insert(0, ".")

from src.database import async_session_maker, init_db
from src.kernel.identity.role_directory import RoleDirectory
from src.kernel.models.entry import Entry, EntryStatus
from src.kernel.records.record_store import RecordStore
from src.orchestration.actions import ActionSurface, WorkflowAction
from src.schemas.entry import validate_payload

ADMIN = "m.dupont@aivancity.ai"
ROLES = {
    ADMIN: "admin",
    "jl.martin@aivancity.ai": "professor",
    "s.laurent@aivancity.ai": "department_head",
    "a.moreau@aivancity.ai": "professor",
}
REVIEWER = "s.laurent@aivancity.ai"

# Actions (and acting identity) that take a fresh draft to each status
PATHS = {
    EntryStatus.DRAFT: [],
    EntryStatus.PENDING_REVIEW: [(WorkflowAction.SUBMIT, None)],
    EntryStatus.APPROVED: [(WorkflowAction.SUBMIT, None), (WorkflowAction.APPROVE, REVIEWER)],
    EntryStatus.REJECTED: [(WorkflowAction.SUBMIT, None), (WorkflowAction.REJECT, REVIEWER)],
    EntryStatus.PUBLISHED: [
        (WorkflowAction.SUBMIT, None),
        (WorkflowAction.APPROVE, REVIEWER),
        (WorkflowAction.PUBLISH, ADMIN),
    ],
}

DEMO_ENTRIES = [
    ("research", "jl.martin@aivancity.ai", EntryStatus.PUBLISHED, {
        "title": "Transformer Architectures for Ethical AI Decision-Making",
        "authors": "Jean-Luc Martin, Marie Dupont",
        "publication_type": "journal_article",
        "journal": "Journal of AI Ethics",
        "year": "2025",
        "doi": "10.1234/jaie.2025.001",
        "abstract": "This paper explores novel transformer architectures designed to incorporate "
                    "ethical constraints directly into AI decision-making processes.",
        "keywords": "AI Ethics, Transformers, Fairness, Transparency",
        "department": "AI & Data Science",
    }),
    ("research", "a.moreau@aivancity.ai", EntryStatus.PENDING_REVIEW, {
        "title": "Corporate Governance and AI Regulation in the EU",
        "authors": "Alexandre Moreau",
        "publication_type": "conference_paper",
        "journal": "European Conference on Digital Ethics",
        "year": "2026",
        "abstract": "An analysis of emerging EU regulatory frameworks for artificial intelligence "
                    "and their impact on corporate governance practices.",
        "keywords": "EU Regulation, AI Governance, Corporate Ethics",
        "department": "Ethics & Society",
    }),
    ("research", "jl.martin@aivancity.ai", EntryStatus.DRAFT, {
        "title": "Federated Learning for Privacy-Preserving Healthcare Analytics",
        "authors": "Jean-Luc Martin, Sophie Laurent",
        "publication_type": "working_paper",
        "year": "2026",
        "abstract": "A federated learning approach that lets healthcare institutions train "
                    "models together without sharing patient data.",
        "keywords": "Federated Learning, Healthcare, Privacy",
        "department": "AI & Data Science",
    }),
    ("research", ADMIN, EntryStatus.APPROVED, {
        "title": "The Future of AI in Higher Education: A Strategic Perspective",
        "authors": "Marie Dupont",
        "publication_type": "blog_post",
        "year": "2026",
        "abstract": "How artificial intelligence is reshaping curriculum design and "
                    "institutional operations in European higher education.",
        "keywords": "AI, Higher Education, Strategy, EdTech",
        "department": "AI & Data Science",
    }),
    ("research", "a.moreau@aivancity.ai", EntryStatus.REJECTED, {
        "title": "Philosophical Foundations of Machine Consciousness",
        "authors": "Alexandre Moreau",
        "publication_type": "book_chapter",
        "year": "2025",
        "abstract": "A philosophical examination of whether machines can achieve consciousness "
                    "and what that implies for society.",
        "keywords": "Machine Consciousness, Philosophy, Ethics",
        "department": "Ethics & Society",
    }),
    ("partnership", REVIEWER, EntryStatus.PUBLISHED, {
        "partner_name": "Microsoft France",
        "partner_type": "corporate",
        "country": "France",
        "strategic_objectives": "Joint AI research program and cloud infrastructure for student projects",
        "start_date": "2025-09-01",
        "end_date": "2028-08-31",
        "contact_person": "Pierre Leduc",
        "contact_email": "p.leduc@microsoft.com",
        "description": "Joint AI research lab and cloud computing resources for capstone projects.",
    }),
    ("partnership", REVIEWER, EntryStatus.PENDING_REVIEW, {
        "partner_name": "ETH Zurich",
        "partner_type": "academic",
        "country": "Switzerland",
        "strategic_objectives": "Student exchange program and collaborative research in responsible AI",
        "start_date": "2026-03-01",
        "contact_person": "Dr. Hans Mueller",
        "contact_email": "h.mueller@ethz.ch",
        "description": "Student exchanges and joint research on responsible AI development.",
    }),
    ("ranking", ADMIN, EntryStatus.PUBLISHED, {
        "ranking_body": "Le Figaro Etudiant",
        "program_name": "MSc Artificial Intelligence for Business",
        "year": "2025",
        "rank": "3",
        "previous_rank": "5",
        "category": "Masters in AI",
        "accreditation_type": "RNCP Level 7",
        "notes": "Significant jump from 5th to 3rd place",
    }),
    ("ranking", REVIEWER, EntryStatus.DRAFT, {
        "ranking_body": "QS World University Rankings",
        "program_name": "MSc Data Science & AI Ethics",
        "year": "2026",
        "rank": "45",
        "category": "Data Science & AI",
        "accreditation_type": "CGE Label",
    }),
]


async def main():
    await init_db()

    async with async_session_maker() as session:
        directory = RoleDirectory(session)
        await directory.bootstrap_admin(ADMIN)
        for email, role in ROLES.items():
            await directory.assign_role(ADMIN, email, role)
        await session.commit()
        print(f"Roles: {len(ROLES)} assigned")

        surface = ActionSurface(session)
        store = RecordStore(session)
        for kind, author, target, payload in DEMO_ENTRIES:
            entry = await store.insert(Entry(
                kind=kind,
                created_by=author,
                payload=validate_payload(kind, payload),
            ))
            for action, actor in PATHS[target]:
                reason = "Insufficient empirical evidence. Please add case studies." \
                    if action is WorkflowAction.REJECT else None
                entry = await surface.perform(entry.id, action, actor or author, reason=reason)
            await session.commit()
            print(f"  [{kind}] {entry.workflow_status.value:15} {entry.id}")

        print(f"\nStats: {await store.stats()}")


if __name__ == "__main__":
    asyncio.run(main())
