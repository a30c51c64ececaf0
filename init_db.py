"""
Initialize database and create tables
Run this script once to set up your database (or use `flask init-db`)
"""

from extensions import db


def init_database():
    """Create every table; must run inside an application context"""
    from flask import current_app

    print("Creating database tables...")
    db.create_all()
    print("✓ Database tables created successfully!")
    print(f"Database location: {current_app.config['SQLALCHEMY_DATABASE_URI']}")

    # Print all tables
    print("\nTables created:")
    for table in db.metadata.sorted_tables:
        print(f"  - {table.name}")


if __name__ == '__main__':
    from app import create_app

    app = create_app('development')
    with app.app_context():
        init_database()
