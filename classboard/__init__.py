"""
classboard: personal academic dashboard (semesters, classes, notes,
activities, agenda, exam grades, attendance) on top of a Supabase backend.
"""
