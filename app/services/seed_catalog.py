"""Static seed catalog.

These courses predate the document store.  They carry legacy integer ids,
no ``created_by`` and no status: a course without an author is a seed
course and is always approved.  Admin edits to them are persisted as
partial overrides and merged on top at read time; this tuple itself is
never modified.
"""

from __future__ import annotations

from app.models.course import Course, Section, SectionItem

_UNSPLASH = "https://images.unsplash.com/{photo}?w=400&h=250&fit=crop"


def _section(title: str, duration: str, *items: tuple[str, str, str]) -> Section:
    return Section(
        title=title,
        duration=duration,
        items=tuple(SectionItem(t, d, kind) for t, d, kind in items),
    )


def _course(
    course_id: int,
    title: str,
    *,
    level: str,
    category: str,
    price: float,
    original_price: float,
    photo: str,
    description: str,
    learnings: tuple[str, ...],
    requirements: tuple[str, ...],
    sections: tuple[Section, ...],
    full_description: str | None = None,
    created_at: int = 1736899200,  # 2025-01-15
) -> Course:
    return Course(
        id=course_id,
        title=title,
        description=description,
        full_description=full_description or description,
        category=category,
        level=level,
        price=price,
        original_price=original_price,
        image=_UNSPLASH.format(photo=photo),
        learnings=learnings,
        requirements=requirements,
        sections=sections,
        created_at=created_at,
    )


SEED_COURSES: tuple[Course, ...] = (
    _course(
        1,
        "Artificial Intelligence",
        level="Advanced",
        category="Artificial Intelligence (AI)",
        price=8999,
        original_price=14999,
        photo="photo-1677442136019-21780ecad995",
        description=(
            "Fundamental concepts and advanced techniques, including neural "
            "networks and machine learning algorithms, with real-world case "
            "studies and hands-on projects."
        ),
        full_description=(
            "Start with the fundamentals and progress to neural networks, deep "
            "learning and real-world AI applications through projects, case "
            "studies and practical exercises."
        ),
        learnings=(
            "Master AI fundamentals and advanced techniques",
            "Understand neural networks and machine learning algorithms",
            "Build real-world AI applications",
            "Implement deep learning models",
        ),
        requirements=(
            "Basic programming knowledge (Python recommended)",
            "Understanding of mathematics and statistics",
        ),
        sections=(
            _section(
                "Introduction to AI",
                "45min",
                ("What is Artificial Intelligence?", "10:30", "video"),
                ("History of AI", "8:15", "video"),
                ("Introduction Quiz", "10:00", "quiz"),
            ),
            _section(
                "Machine Learning Basics",
                "1hr 30min",
                ("Supervised Learning", "15:45", "video"),
                ("Unsupervised Learning", "12:30", "video"),
                ("Assignment: Build Your First Model", "3:00", "assignment"),
            ),
            _section(
                "Neural Networks",
                "2hr",
                ("Activation Functions", "10:45", "video"),
                ("Backpropagation", "18:20", "video"),
                ("Project: Image Classification", "2:00", "assignment"),
            ),
            _section(
                "Deep Learning",
                "2hr 45min",
                ("TensorFlow Introduction", "12:30", "video"),
                ("Transfer Learning", "15:25", "video"),
                ("Final Project", "8:00", "assignment"),
            ),
            _section(
                "AI Applications",
                "1hr 30min",
                ("Natural Language Processing", "15:30", "video"),
                ("Computer Vision", "12:45", "video"),
                ("Course Conclusion", "6:20", "video"),
            ),
        ),
    ),
    _course(
        2,
        "Big Data Analytics",
        level="Intermediate",
        category="Data Science",
        price=7999,
        original_price=12999,
        photo="photo-1551288049-bebda4e38f71",
        description=(
            "Collect, process and visualize large data sets with the Hadoop "
            "and Spark ecosystems."
        ),
        learnings=(
            "Process data with MapReduce and Spark",
            "Design dashboards that answer business questions",
        ),
        requirements=("Basic SQL", "Familiarity with any programming language"),
        sections=(
            _section(
                "Introduction to Big Data",
                "50min",
                ("What is Big Data?", "8:15", "video"),
                ("Hadoop Ecosystem", "12:45", "video"),
            ),
            _section(
                "Data Processing",
                "1hr 40min",
                ("ETL Processes", "12:30", "video"),
                ("Spark Processing", "14:20", "video"),
            ),
            _section(
                "Data Visualization",
                "1hr 10min",
                ("Dashboard Design", "11:45", "video"),
                ("Visualization Project", "7:00", "assignment"),
            ),
        ),
    ),
    _course(
        3,
        "3D Animations, VR & Simulation",
        level="Intermediate",
        category="Animation & VR",
        price=8499,
        original_price=13999,
        photo="photo-1633356122544-f134324a6cee",
        description="Model, animate and ship interactive 3D and VR experiences.",
        learnings=("Model and texture 3D assets", "Build a VR walkthrough"),
        requirements=("A computer with a dedicated GPU",),
        sections=(
            _section(
                "3D Modeling Basics",
                "45min",
                ("Introduction to 3D Modeling", "8:30", "video"),
                ("Modeling Techniques", "11:45", "video"),
            ),
            _section(
                "Virtual Reality",
                "1hr",
                ("VR Hardware Overview", "9:10", "video"),
                ("VR Project", "12:00", "assignment"),
            ),
        ),
    ),
    _course(
        6,
        "Advance Python",
        level="Advanced",
        category="Programming",
        price=7499,
        original_price=12499,
        photo="photo-1526379095098-d400fd0bf935",
        description="Decorators, generators, concurrency and packaging for working Python developers.",
        learnings=("Write idiomatic, testable Python", "Use asyncio effectively"),
        requirements=("Comfortable with Python basics",),
        sections=(
            _section(
                "Advanced Functions",
                "55min",
                ("Closures and Decorators", "14:10", "video"),
                ("Generators", "12:40", "video"),
            ),
            _section(
                "Concurrency",
                "1hr 20min",
                ("Threads vs Processes", "13:00", "video"),
                ("asyncio in Practice", "16:30", "video"),
                ("Concurrency Quiz", "5:00", "quiz"),
            ),
        ),
    ),
    _course(
        8,
        "Project Management",
        level="Intermediate",
        category="Management",
        price=6999,
        original_price=11499,
        photo="photo-1552664730-d307ca884978",
        description="Plan, run and close projects with predictable outcomes.",
        learnings=("Build a realistic project plan", "Manage risk and scope"),
        requirements=("No prior experience needed",),
        sections=(
            _section(
                "Project Initiation",
                "40min",
                ("Project Charter", "9:30", "video"),
                ("Stakeholder Analysis", "10:15", "video"),
            ),
            _section(
                "Planning and Execution",
                "1hr 15min",
                ("Work Breakdown Structure", "12:00", "video"),
                ("Risk Register", "11:20", "assignment"),
            ),
        ),
    ),
    _course(
        9,
        "The Web Developer Bootcamp 2024",
        level="Intermediate",
        category="Web Development",
        price=8999,
        original_price=14999,
        photo="photo-1498050108023-c5249f4df085",
        description="HTML, CSS, JavaScript and a backend, from first page to deployed app.",
        learnings=("Build responsive sites", "Deploy a full-stack application"),
        requirements=("A computer with internet access",),
        sections=(
            _section(
                "Frontend Foundations",
                "1hr 30min",
                ("HTML Essentials", "14:00", "video"),
                ("Modern CSS Layout", "16:20", "video"),
            ),
            _section(
                "JavaScript",
                "2hr",
                ("DOM Manipulation", "15:10", "video"),
                ("Async JavaScript", "17:45", "video"),
            ),
            _section(
                "Backend and Deployment",
                "1hr 40min",
                ("REST APIs", "14:30", "video"),
                ("Capstone Project", "20:00", "assignment"),
            ),
        ),
    ),
    _course(
        12,
        "Docker & Kubernetes: The Practical Guide",
        level="Intermediate",
        category="DevOps",
        price=7999,
        original_price=12999,
        photo="photo-1605745341112-85968b19335b",
        description="Containerize applications and run them on Kubernetes.",
        learnings=("Write production Dockerfiles", "Deploy workloads to Kubernetes"),
        requirements=("Basic command line skills",),
        sections=(
            _section(
                "Containers",
                "1hr",
                ("Images and Containers", "12:10", "video"),
                ("Compose for Local Development", "13:40", "video"),
            ),
            _section(
                "Kubernetes",
                "1hr 30min",
                ("Pods and Deployments", "15:00", "video"),
                ("Kubernetes Quiz", "5:00", "quiz"),
            ),
        ),
    ),
    _course(
        13,
        "Database Design and SQL",
        level="Beginner",
        category="Database",
        price=5999,
        original_price=9999,
        photo="photo-1544383835-bda2bc66a55d",
        description="Model data relationally and query it with confidence.",
        learnings=("Normalize a schema", "Write joins and aggregates"),
        requirements=("No prior experience needed",),
        sections=(
            _section(
                "Relational Modeling",
                "50min",
                ("Entities and Relationships", "11:00", "video"),
                ("Normalization", "13:25", "video"),
            ),
            _section(
                "SQL",
                "1hr 10min",
                ("SELECT and JOIN", "14:15", "video"),
                ("SQL Exercises", "10:00", "assignment"),
            ),
        ),
    ),
)
