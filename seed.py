from database import SessionLocal, engine, Base
from models.masters import ClassMaster, SectionMaster
from models.students import Student
from models.exams import Subject, ExamType, ExamSchedule
from models.results import Result, ResultSubject

# --- Tables bana do agar missing hain ---
Base.metadata.create_all(bind=engine)

# Database Connection
db = SessionLocal()

def seed_data():
    print("🌱 Seeding Demo Data...")

    # 1. CLASS + SECTIONS
    cls = db.query(ClassMaster).filter_by(class_name="Class 10").first()
    if not cls:
        cls = ClassMaster(class_name="Class 10")
        db.add(cls)
        db.commit()
        db.refresh(cls)
        print("✅ Added: Class 10")

    sections = {}
    for sec in ["A", "B"]:
        row = db.query(SectionMaster).filter_by(class_id=cls.id, section_name=sec).first()
        if not row:
            row = SectionMaster(class_id=cls.id, section_name=sec)
            db.add(row)
            db.commit()
            db.refresh(row)
            print(f"  └── Section {sec} added")
        sections[sec] = row.id

    # 2. SUBJECTS (Oral + Written share ENG, so they pass/fail together)
    subjects = [
        {"name": "English Oral", "code": "ENG", "max": 50, "pass": 20},
        {"name": "English Written", "code": "ENG", "max": 50, "pass": 20},
        {"name": "Mathematics", "code": "MATH", "max": 100, "pass": 33},
        {"name": "Science", "code": "SCI", "max": 100, "pass": 33},
        {"name": "Urdu", "code": "URD", "max": 100, "pass": 33},
    ]

    # 3. EXAM
    exam = db.query(ExamType).filter_by(exam_name="Half Yearly 2025").first()
    if not exam:
        exam = ExamType(exam_name="Half Yearly 2025", session="2025-2026")
        db.add(exam)
        db.commit()
        db.refresh(exam)
        print("📝 Added Exam: Half Yearly 2025")

    for s in subjects:
        sub = db.query(Subject).filter_by(subject_name=s["name"]).first()
        if not sub:
            sub = Subject(subject_name=s["name"], subject_code=s["code"])
            db.add(sub)
            db.commit()
            db.refresh(sub)
            print(f"📚 Added Subject: {s['name']} ({s['code']})")

        if not db.query(ExamSchedule).filter_by(exam_id=exam.id, class_id=cls.id, subject_id=sub.id).first():
            db.add(ExamSchedule(
                exam_id=exam.id, class_id=cls.id, subject_id=sub.id,
                max_marks=s["max"], pass_marks=s["pass"]
            ))
    db.commit()

    # 4. STUDENTS
    roster = [
        ("ADM-10001", "Ayesha Khan", "A", 1),
        ("ADM-10002", "Bilal Ahmed", "A", 2),
        ("ADM-10003", "Sara Malik", "A", 3),
        ("ADM-10004", "Usman Ali", "B", 1),
        ("ADM-10005", "Hina Raza", "B", 2),
    ]
    for adm, name, sec, roll in roster:
        if not db.query(Student).filter_by(admission_no=adm).first():
            db.add(Student(
                admission_no=adm, student_name=name, class_id=cls.id,
                section_id=sections[sec], roll_no=roll, status=True
            ))
            print(f"🎓 Added Student: {name}")
    db.commit()

    print("\n🎉 All Data Seeded Successfully!")
    print("   Next: POST /api/v1/results/bulk-create with "
          f"{{\"exam_id\": {exam.id}, \"class_id\": {cls.id}}}")
    db.close()

if __name__ == "__main__":
    seed_data()
