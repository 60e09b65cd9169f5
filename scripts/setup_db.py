import os
import sys

import psycopg2

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from logan.config import DATABASE_URL

SCHEMA = """
CREATE EXTENSION IF NOT EXISTS "pgcrypto";

CREATE TABLE IF NOT EXISTS user_profiles (
    user_id TEXT PRIMARY KEY,
    fitness_level TEXT,
    primary_goals TEXT[],
    preferred_duration_minutes INTEGER,
    available_equipment TEXT[],
    focus_areas TEXT[],
    workout_frequency_per_week INTEGER,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS workouts (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id TEXT,
    chat_id UUID,
    name TEXT NOT NULL,
    description TEXT,
    scheduled_date DATE,
    duration_minutes INTEGER,
    ai_notes TEXT,
    status TEXT NOT NULL DEFAULT 'proposed'
        CHECK (status IN ('proposed', 'active', 'completed', 'skipped')),
    started_at TIMESTAMPTZ,
    completed_at TIMESTAMPTZ,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS chats (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    user_id TEXT NOT NULL,
    title TEXT,
    status TEXT NOT NULL DEFAULT 'active',
    workout_id UUID REFERENCES workouts(id) ON DELETE SET NULL,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS messages (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    chat_id UUID REFERENCES chats(id) ON DELETE CASCADE,
    user_id TEXT,
    sender TEXT NOT NULL CHECK (sender IN ('user', 'logan')),
    content TEXT NOT NULL,
    message_type TEXT NOT NULL DEFAULT 'text'
        CHECK (message_type IN ('text', 'workout_generated', 'system')),
    created_at TIMESTAMPTZ DEFAULT NOW()
);

CREATE TABLE IF NOT EXISTS exercises (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    workout_id UUID REFERENCES workouts(id) ON DELETE CASCADE,
    name TEXT NOT NULL,
    sets INTEGER,
    reps INTEGER,
    weight_lbs NUMERIC,
    rest_seconds INTEGER DEFAULT 60,
    notes TEXT,
    order_in_workout INTEGER,
    completed BOOLEAN DEFAULT FALSE,
    actual_sets INTEGER,
    actual_reps INTEGER[],
    actual_weight_lbs NUMERIC,
    created_at TIMESTAMPTZ DEFAULT NOW(),
    updated_at TIMESTAMPTZ DEFAULT NOW()
);
"""

if not DATABASE_URL:
    print("🚨 DATABASE_URL 이 설정되지 않았습니다. .env 파일을 확인하세요.")
    sys.exit(1)

conn = psycopg2.connect(DATABASE_URL)
cursor = conn.cursor()
cursor.execute(SCHEMA)

# 저장 및 종료
conn.commit()
conn.close()

print("✅ PostgreSQL에 Logan 테이블 생성 완료!")
