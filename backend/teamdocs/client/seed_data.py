"""Demo data shared by the database seeder and the offline client fallback.

Due dates are offsets from "today" so the demo dashboard always has something
due soon, one item overdue and one completed.
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Any, Dict, List, Optional

DEMO_MEMBERS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "name": "John Smith",
        "email": "john.smith@company.com",
        "role": "developer",
        "skills": ["Java", "Spring Boot", "Microservices"],
        "join_offset_days": -180,
    },
    {
        "id": 2,
        "name": "Jane Doe",
        "email": "jane.doe@company.com",
        "role": "developer",
        "skills": ["Java", "OOP", "Design Patterns"],
        "join_offset_days": -175,
    },
    {
        "id": 3,
        "name": "Mike Johnson",
        "email": "mike.johnson@company.com",
        "role": "lead",
        "skills": ["Java", "Spring Boot", "Architecture"],
        "join_offset_days": -190,
    },
    {
        "id": 4,
        "name": "Sarah Wilson",
        "email": "sarah.wilson@company.com",
        "role": "developer",
        "skills": ["React", "JavaScript", "Frontend"],
        "join_offset_days": -170,
    },
]

DEMO_ASSIGNMENTS: List[Dict[str, Any]] = [
    {
        "id": 1,
        "topic": "Abstract Classes in Java",
        "category": "core-java",
        "assignee_id": 1,
        "status": "in-progress",
        "priority": "high",
        "due_offset_days": 2,
        "description": "Document abstract classes with real-world examples",
        "progress": 60,
    },
    {
        "id": 2,
        "topic": "Object-Oriented Programming",
        "category": "core-java",
        "assignee_id": 2,
        "status": "pending",
        "priority": "medium",
        "due_offset_days": 4,
        "description": "Cover OOP principles with examples",
        "progress": 0,
    },
    {
        "id": 3,
        "topic": "Spring Boot Fundamentals",
        "category": "backend",
        "assignee_id": 3,
        "status": "review",
        "priority": "high",
        "due_offset_days": 0,
        "description": "Complete guide to Spring Boot basics",
        "progress": 90,
    },
    {
        "id": 4,
        "topic": "React.js Fundamentals",
        "category": "frontend",
        "assignee_id": 4,
        "status": "completed",
        "priority": "medium",
        "due_offset_days": -1,
        "description": "Comprehensive React.js documentation",
        "progress": 100,
    },
]

DEMO_DOCUMENTATION: Dict[str, Dict[str, Dict[str, str]]] = {
    "core-java": {
        "Abstract Classes": {
            "path": "docs/core-java/abstract-classes.md",
            "status": "in-progress",
            "author": "John Smith",
        },
        "Object-Oriented Programming": {
            "path": "docs/core-java/oop.md",
            "status": "pending",
            "author": "Jane Doe",
        },
    },
    "backend": {
        "Spring Boot Fundamentals": {
            "path": "docs/backend/spring-boot-fundamentals.md",
            "status": "review",
            "author": "Mike Johnson",
        },
    },
    "frontend": {
        "React.js Fundamentals": {
            "path": "docs/frontend/react-fundamentals.md",
            "status": "completed",
            "author": "Sarah Wilson",
        },
    },
}


def member_records(today: Optional[date] = None) -> List[Dict[str, Any]]:
    """Demo members in wire shape (camelCase), with counters derived from the demo assignments."""
    today = today or date.today()
    records = []
    for member in DEMO_MEMBERS:
        owned = [a for a in DEMO_ASSIGNMENTS if a["assignee_id"] == member["id"]]
        records.append(
            {
                "id": member["id"],
                "name": member["name"],
                "email": member["email"],
                "role": member["role"],
                "skills": list(member["skills"]),
                "assignedTopics": len(owned),
                "completedTopics": sum(1 for a in owned if a["status"] == "completed"),
                "joinDate": (today + timedelta(days=member["join_offset_days"])).isoformat() + "T00:00:00+00:00",
                "isActive": True,
            }
        )
    return records


def assignment_records(today: Optional[date] = None) -> List[Dict[str, Any]]:
    today = today or date.today()
    names = {m["id"]: m["name"] for m in DEMO_MEMBERS}
    return [
        {
            "id": a["id"],
            "topic": a["topic"],
            "category": a["category"],
            "assignee": names[a["assignee_id"]],
            "assigneeId": a["assignee_id"],
            "status": a["status"],
            "priority": a["priority"],
            "dueDate": (today + timedelta(days=a["due_offset_days"])).isoformat() + "T17:00:00+00:00",
            "description": a["description"],
            "progress": a["progress"],
        }
        for a in DEMO_ASSIGNMENTS
    ]
