"""Database schema for workout analytics, training load and zone breakthroughs."""

SCHEMA = """
-- Athlete profile, one row per user
CREATE TABLE IF NOT EXISTS athlete_profile (
    user_id TEXT PRIMARY KEY,
    experience_level TEXT DEFAULT 'intermediate',
    max_hr INTEGER,
    resting_hr INTEGER,
    lactate_threshold_hr INTEGER,
    gender TEXT DEFAULT 'male',
    bike_ftp INTEGER,
    run_pace_per_km INTEGER,
    swim_pace_per_100m INTEGER,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

-- Zone tables of the active plan, validated JSON with a schema version
CREATE TABLE IF NOT EXISTS plan_zone_config (
    user_id TEXT PRIMARY KEY,
    version INTEGER NOT NULL,
    config_json TEXT NOT NULL,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP
);

-- One analytics record per completed workout
CREATE TABLE IF NOT EXISTS workout_analytics (
    workout_id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    workout_date TEXT NOT NULL,  -- ISO date (YYYY-MM-DD)
    discipline TEXT,
    moving_time REAL,
    distance REAL,
    training_stress_score REAL,
    intensity_factor REAL,
    normalized_power REAL,
    efficiency_factor REAL,
    payload_json TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_workout_analytics_user_date
    ON workout_analytics(user_id, workout_date);

-- Daily load chain, one row per user per day
CREATE TABLE IF NOT EXISTS training_load (
    user_id TEXT NOT NULL,
    date TEXT NOT NULL,
    daily_tss REAL NOT NULL DEFAULT 0,
    atl REAL NOT NULL DEFAULT 0,
    ctl REAL NOT NULL DEFAULT 0,
    tsb REAL NOT NULL DEFAULT 0,
    updated_at TEXT DEFAULT CURRENT_TIMESTAMP,
    PRIMARY KEY (user_id, date)
);

-- Breakthrough detections awaiting corroboration
CREATE TABLE IF NOT EXISTS breakthrough_candidates (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    type TEXT NOT NULL,
    detected_value REAL NOT NULL,
    detected_at TEXT NOT NULL,  -- workout date
    workout_id TEXT NOT NULL,
    created_at TEXT DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (user_id, type, workout_id)
);

CREATE INDEX IF NOT EXISTS idx_breakthrough_candidates_lookup
    ON breakthrough_candidates(user_id, type, detected_at);

-- Daily recovery readings from wearables
CREATE TABLE IF NOT EXISTS recovery_data (
    user_id TEXT NOT NULL,
    date TEXT NOT NULL,
    hrv_ms REAL,
    resting_hr REAL,
    PRIMARY KEY (user_id, date)
);
"""
