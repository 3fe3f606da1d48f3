"""
Prompt templates for structured field extraction from a transcript.

Each context has its own template; ``{transcript}`` is substituted before the
prompt is sent.
"""

from typing import Dict

from visitflow.domain.enums.voice import ExtractionContext

INTAKE_PROMPT = """You are a medical intake assistant. Extract vital signs and symptom information from this nurse-patient conversation transcript.

TRANSCRIPT:
{transcript}

Return ONLY valid JSON (no markdown, no code blocks) with these fields:
{{
  "blood_pressure_systolic": number or null,
  "blood_pressure_diastolic": number or null,
  "pulse_rate": number or null,
  "temperature": number in Celsius or null,
  "respiratory_rate": number or null,
  "oxygen_saturation": number or null,
  "weight": number in kg or null,
  "height": number in cm or null,
  "pain_level": number 0-10 or null,
  "pain_location": string or null,
  "symptoms": array of strings or null,
  "symptom_duration": string or null,
  "chief_complaint": string or null,
  "confidence": number between 0 and 1
}}

Rules:
- "120 over 80" means systolic 120 and diastolic 80
- Convert Fahrenheit temperatures to Celsius
- Convert pounds to kilograms
- If a value is unclear or not mentioned, use null
- Confidence reflects how clearly the values were stated
- Only extract information that is explicitly mentioned"""

REGISTRATION_PROMPT = """You are a medical receptionist assistant. Extract patient registration information from this conversation transcript.

TRANSCRIPT:
{transcript}

Return ONLY valid JSON (no markdown, no code blocks) with these fields:
{{
  "first_name": string or null,
  "last_name": string or null,
  "date_of_birth": "YYYY-MM-DD" or null,
  "gender": "MALE" | "FEMALE" | "OTHER" or null,
  "phone_number": string or null,
  "email": string or null,
  "address": string or null,
  "emergency_contact_name": string or null,
  "emergency_contact_phone": string or null,
  "emergency_contact_relationship": "SPOUSE" | "PARENT" | "CHILD" | "SIBLING" | "FRIEND" | "OTHER" or null,
  "blood_type": "A+" | "A-" | "B+" | "B-" | "AB+" | "AB-" | "O+" | "O-" or null,
  "known_allergies": string or null,
  "chronic_conditions": string or null,
  "current_medications": string or null,
  "confidence": number between 0 and 1
}}

Rules:
- Capitalize names properly
- Convert spoken dates to YYYY-MM-DD
- "my wife" or "my husband" is SPOUSE; "my mother" or "my father" is PARENT
- If information is unclear or not mentioned, use null
- Only extract information that is explicitly mentioned"""

SYSTEM_PROMPTS: Dict[ExtractionContext, str] = {
    ExtractionContext.INTAKE: "You are a medical data extraction assistant. Always respond with valid JSON only.",
    ExtractionContext.REGISTRATION: "You are a patient registration assistant. Always respond with valid JSON only.",
}

PROMPTS: Dict[ExtractionContext, str] = {
    ExtractionContext.INTAKE: INTAKE_PROMPT,
    ExtractionContext.REGISTRATION: REGISTRATION_PROMPT,
}


def build_prompt(context: ExtractionContext, transcript: str) -> str:
    return PROMPTS[context].format(transcript=transcript)
