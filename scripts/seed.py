#!/usr/bin/env python3
"""
Seed Script: Sample Events and Bookings
=======================================

Clears the events and bookings tables and fills them with a set of sample
developer events, each with a handful of demo bookings.

Usage:
    python scripts/seed.py

Requirements:
    - DATABASE_URL pointing at the target database (defaults to ./devevent.db)

Notes:
    - Existing events and bookings are deleted first
    - Event dates are placed in the coming weeks so the samples never
      show up as past events
"""

import asyncio
import random
import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from app.core.config import settings  # noqa: E402
from app.core.logging_config import setup_logging  # noqa: E402
from app.db.session import database  # noqa: E402
from app.repositories.booking_repository import BookingRepository  # noqa: E402
from app.repositories.event_repository import EventRepository  # noqa: E402


SAMPLE_EVENTS = [
    {
        "title": "React Conference 2025",
        "description": "Annual React conference bringing together developers from around the world to learn about the latest in React development",
        "overview": "Join the biggest React event of the year! Learn about the latest React features, best practices, and network with industry leaders. This conference features keynote speakers from Meta, Vercel, and other major tech companies. Topics include React Server Components, Suspense, concurrent rendering, and the future of React development.",
        "image": "/images/event1.png",
        "venue": "Tech Convention Center",
        "location": "San Francisco, CA",
        "days_ahead": 60,
        "time": "09:00",
        "mode": "hybrid",
        "audience": "React Developers, Frontend Engineers, Full-stack Developers",
        "agenda": [
            "Registration & Welcome Coffee (8:00 AM)",
            "Opening Keynote: Future of React (9:00 AM)",
            "Workshop: Server Components Deep Dive (10:30 AM)",
            "Lunch Break & Networking (12:30 PM)",
            "Panel Discussion: React Ecosystem (2:00 PM)",
            "Advanced Performance Optimization (3:30 PM)",
            "Closing Remarks & Announcements (5:00 PM)",
        ],
        "organizer": "React Community Team",
        "tags": ["react", "javascript", "frontend", "conference"],
    },
    {
        "title": "Next.js 15 Workshop",
        "description": "Comprehensive hands-on workshop covering Next.js 15, App Router, Server Actions, and modern web development patterns",
        "overview": "Master Next.js 15 in this full-day workshop. Learn about Server Components, Server Actions, streaming, caching strategies, and production deployment. Build a full-stack application from scratch using the latest App Router patterns.",
        "image": "/images/event2.png",
        "venue": "Online via Zoom",
        "location": "Virtual Event",
        "days_ahead": 35,
        "time": "14:00",
        "mode": "online",
        "audience": "Web Developers, React Developers, Full-stack Engineers",
        "agenda": [
            "Introduction to Next.js 15 Features",
            "App Router Architecture",
            "Server Components vs Client Components",
            "Server Actions and Form Handling",
            "Data Fetching Patterns",
            "Caching Strategies",
            "Deployment Best Practices",
            "Q&A Session",
        ],
        "organizer": "Vercel",
        "tags": ["nextjs", "react", "fullstack", "workshop", "vercel"],
    },
    {
        "title": "TypeScript Deep Dive",
        "description": "Advanced TypeScript workshop covering type inference, generics, conditional types, and design patterns for scalable applications",
        "overview": "Take your TypeScript skills to the next level. Dive deep into type inference, generic constraints, mapped types, conditional types, and template literal types. Includes hands-on exercises and code reviews.",
        "image": "/images/event3.png",
        "venue": "Microsoft Technology Center",
        "location": "Seattle, WA",
        "days_ahead": 25,
        "time": "10:00",
        "mode": "offline",
        "audience": "JavaScript Developers, Backend Engineers, Full-stack Developers",
        "agenda": [
            "Advanced Type Inference Techniques",
            "Generics and Utility Types",
            "Conditional Types and Type Guards",
            "Mapped Types and Template Literals",
            "Design Patterns in TypeScript",
            "Type-safe API Development",
            "Real-world Case Studies",
        ],
        "organizer": "Microsoft",
        "tags": ["typescript", "javascript", "programming", "types"],
    },
    {
        "title": "Web Performance Masterclass",
        "description": "Learn proven techniques to optimize web application performance, improve Core Web Vitals, and deliver fast user experiences",
        "overview": "This masterclass covers Core Web Vitals, lazy loading strategies, code splitting, image optimization, caching strategies, CDN configuration, and performance monitoring with Lighthouse, WebPageTest and Chrome DevTools.",
        "image": "/images/event4.png",
        "venue": "Performance Labs Austin",
        "location": "Austin, TX",
        "days_ahead": 46,
        "time": "13:00",
        "mode": "hybrid",
        "audience": "Frontend Developers, DevOps Engineers, Web Architects",
        "agenda": [
            "Understanding Core Web Vitals",
            "Image Optimization Techniques",
            "Code Splitting and Lazy Loading",
            "Caching Strategies and Service Workers",
            "Performance Monitoring Tools",
            "HTTP/2 and HTTP/3 Optimizations",
            "Case Studies and Best Practices",
        ],
        "organizer": "Web Performance Group",
        "tags": ["performance", "optimization", "web", "core-web-vitals"],
    },
    {
        "title": "AI-Powered Web Development",
        "description": "Explore how to integrate AI and machine learning capabilities into modern web applications using OpenAI, Langchain, and vector databases",
        "overview": "Learn how to add intelligent features to your applications using embeddings, vector databases, and AI orchestration frameworks. Topics include prompt engineering, retrieval augmented generation, token optimization, and cost management.",
        "image": "/images/event5.png",
        "venue": "AI Innovation Hub",
        "location": "San Jose, CA",
        "days_ahead": 55,
        "time": "11:00",
        "mode": "offline",
        "audience": "Full-stack Developers, AI Enthusiasts, Software Engineers",
        "agenda": [
            "Introduction to AI APIs",
            "Working with OpenAI GPT-4",
            "Vector Databases and Embeddings",
            "Building AI Chat Interfaces",
            "Prompt Engineering Best Practices",
            "RAG Implementation Patterns",
            "Security and Cost Optimization",
            "Live Demo and Q&A",
        ],
        "organizer": "AI Developers Collective",
        "tags": ["ai", "machinelearning", "openai", "webdev", "gpt"],
    },
    {
        "title": "Modern CSS and Tailwind CSS",
        "description": "Master modern CSS techniques, responsive design patterns, and Tailwind CSS for building beautiful, maintainable user interfaces",
        "overview": "Cover CSS Grid, Flexbox, custom properties, animations, and responsive design, then dive into Tailwind CSS configuration, component patterns, and building a complete design system from scratch.",
        "image": "/images/event6.png",
        "venue": "Design Studio Online",
        "location": "Virtual Event",
        "days_ahead": 40,
        "time": "15:00",
        "mode": "online",
        "audience": "Frontend Developers, UI/UX Designers, Web Designers",
        "agenda": [
            "Modern CSS Features Overview",
            "CSS Grid and Flexbox Mastery",
            "Tailwind CSS Setup and Configuration",
            "Component Patterns with Tailwind",
            "Dark Mode Implementation",
            "Responsive Design Strategies",
            "Performance and Optimization",
            "Building a Design System",
        ],
        "organizer": "Frontend Masters",
        "tags": ["css", "tailwind", "design", "frontend", "ui"],
    },
]

SAMPLE_EMAILS = [
    "john.doe@example.com",
    "jane.smith@example.com",
    "developer@react.dev",
    "engineer@vercel.com",
    "alice.wonder@tech.com",
    "bob.builder@dev.io",
]


def event_fields(sample: dict, today: date) -> dict:
    """Sample record to model fields, with the date resolved from ``days_ahead``."""
    fields = {key: value for key, value in sample.items() if key != "days_ahead"}
    fields["date"] = (today + timedelta(days=sample["days_ahead"])).isoformat()
    return fields


async def seed() -> None:
    print(f"{'='*70}")
    print("DevEvent Database Seed")
    print(f"{'='*70}")
    print(f"Database: {database.database_url}\n")

    await database.connect()
    print("✅ Connected to database\n")

    session = await database.session()
    async with session:
        events = EventRepository(session)
        bookings = BookingRepository(session)

        print("🗑️  Clearing existing data...")
        deleted_bookings = await bookings.delete_all()
        deleted_events = await events.delete_all()
        print(f"   - Deleted {deleted_events} events")
        print(f"   - Deleted {deleted_bookings} bookings\n")

        print("📅 Seeding events...")
        today = date.today()
        created = []
        for sample in SAMPLE_EVENTS:
            created.append(await events.create(**event_fields(sample, today)))
        print(f"✅ Created {len(created)} events\n")

        for index, event in enumerate(created, start=1):
            print(f"   {index}. {event.title}")
            print(f"      - Slug: {event.slug}")
            print(f"      - Date: {event.date} at {event.time}")
            print(f"      - Mode: {event.mode}")
            print(f"      - Tags: {', '.join(event.tags)}")

        print("\n🎫 Seeding bookings...")
        total_bookings = 0
        for event in created:
            emails = SAMPLE_EMAILS[:random.randint(2, 4)]
            for email in emails:
                await bookings.create(event_id=event.id, email=email)
            total_bookings += len(emails)
            print(f"   - Created {len(emails)} bookings for \"{event.title}\"")

        await session.commit()

    print(f"\n{'='*70}")
    print("✨ Seed completed successfully!")
    print(f"   - Events created: {len(created)}")
    print(f"   - Bookings created: {total_bookings}")
    print(f"{'='*70}")

    await database.dispose()


def main():
    """Main entry point for seed script."""
    setup_logging(debug=settings.is_debug_mode, json_logs=settings.use_json_logs)

    try:
        asyncio.run(seed())
    except KeyboardInterrupt:
        print("\n\n⚠️  Seed cancelled by user.")
        sys.exit(130)
    except Exception as e:
        print(f"\n❌ Seed failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
