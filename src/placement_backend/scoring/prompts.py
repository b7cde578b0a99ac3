"""Prompt construction for ATS scoring.

The candidate side prefers the AI-parsed resume when the student has one and
falls back to the profile fields otherwise.
"""

from typing import Any, Dict, List

from placement_backend.models.job import Job
from placement_backend.models.student import Student

SYSTEM_PROMPT = (
    "You are an ATS (Applicant Tracking System) scoring expert. Analyze how well a "
    "candidate matches a job and return ONLY a JSON object, no markdown, no explanations."
)

RESPONSE_FORMAT = """Return ONLY this JSON format:
{
  "score": 85,
  "strengths": ["Strong match in React and Node.js", "Relevant project experience"],
  "weaknesses": ["Limited professional work experience", "Missing Docker expertise"],
  "recommendation": "Highly recommended"
}

Score should be 0-100 based on:
- Skills match (40%)
- Experience relevance (25%)
- Education match (20%)
- Projects relevance (15%)

Be specific in strengths and weaknesses. Mention actual skills, projects, or companies.
Recommendation must be one of: "Highly recommended", "Recommended", "Maybe", "Not recommended"
"""


def _join(values: List[Any], default: str = "None") -> str:
    items = [str(value) for value in values or [] if value]
    return ", ".join(items) if items else default


def _resume_section(resume: Dict[str, Any]) -> str:
    education = "\n".join(
        f"{edu.get('degree', '')} from {edu.get('institution', '')} ({edu.get('year', '')}) - CGPA: {edu.get('cgpa') or 'N/A'}"
        for edu in resume.get("education") or []
    ) or "None listed"
    experience = "\n\n".join(
        f"{exp.get('title', '')} at {exp.get('company', '')} ({exp.get('duration', '')})\n{exp.get('description', '')}"
        for exp in resume.get("experience") or []
    ) or "None listed"
    projects = "\n\n".join(
        f"{proj.get('title', '')}: {proj.get('description', '')}\nTechnologies: {_join(proj.get('technologies'), 'N/A')}"
        for proj in resume.get("projects") or []
    ) or "None listed"
    certifications = "\n".join(
        f"{cert.get('name', '')} by {cert.get('issuer', '')}"
        for cert in resume.get("certifications") or []
    ) or "None listed"
    
    return (
        f"SKILLS:\n{_join(resume.get('skills'), 'None listed')}\n\n"
        f"EDUCATION:\n{education}\n\n"
        f"EXPERIENCE:\n{experience}\n\n"
        f"PROJECTS:\n{projects}\n\n"
        f"CERTIFICATIONS:\n{certifications}"
    )


def build_candidate_profile(student: Student) -> str:
    """Render the candidate side of the scoring prompt."""
    if student.resume_data:
        return "RESUME CONTENT:\n" + _resume_section(student.resume_data)
    
    return (
        "CANDIDATE PROFILE:\n"
        f"Name: {student.full_name}\n"
        f"Skills: {_join(student.skills)}\n"
        f"Branch: {student.branch or 'Not specified'}\n"
        f"CGPA: {student.cgpa if student.cgpa is not None else 'Not specified'}\n"
        f"Graduation Year: {student.graduation_year or 'Not specified'}\n"
        f"Projects: {_join([p.get('title') for p in student.projects or []])}\n"
        f"Experience: {_join([i.get('company_name') for i in student.internships or []])}"
    )


def build_job_requirements(job: Job) -> str:
    """Render the job side of the scoring prompt."""
    return (
        "JOB DESCRIPTION:\n"
        f"Title: {job.title}\n"
        f"Required Skills: {_join(job.skills_required)}\n"
        f"Description: {job.description}\n"
        f"Minimum CGPA: {job.min_cgpa if job.min_cgpa is not None else 'Not specified'}\n"
        f"Preferred Branches: {_join(job.branches, 'Any')}\n"
        f"Location: {job.location or 'Not specified'}"
    )


def build_scoring_prompt(student: Student, job: Job) -> str:
    return "\n\n".join([
        build_candidate_profile(student),
        build_job_requirements(job),
        RESPONSE_FORMAT,
    ])
