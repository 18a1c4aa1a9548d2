# scripts/reset_db.py
import argparse, sqlite3, sys, os, shutil, datetime

def backup(db):
    ts = datetime.datetime.now().strftime("%Y%m%d-%H%M%S")
    dst = f"{os.path.splitext(db)[0]}.backup-{ts}.db"
    shutil.copyfile(db, dst)
    print(f"[OK] Backup -> {dst}")

def exec_sql(db, sql, params=()):
    con = sqlite3.connect(db)
    cur = con.cursor()
    try:
        if isinstance(sql, (list, tuple)):
            for s in sql:
                cur.execute(s)
        else:
            cur.execute(sql, params)
        con.commit()
    finally:
        con.close()

def count(db, table):
    con = sqlite3.connect(db)
    cur = con.cursor()
    try:
        cur.execute(f"SELECT COUNT(*) FROM {table}")
        return cur.fetchone()[0]
    finally:
        con.close()

def main():
    p = argparse.ArgumentParser(description="Reset helpers for offloading.db")
    p.add_argument("--db", default="offloading.db", help="path to sqlite db")
    sub = p.add_subparsers(dest="mode", required=True)

    a = sub.add_parser("reset-experiment", help="Delete results, events and recall sessions of one experiment")
    a.add_argument("--experiment", required=True, help="experiment id")

    sub.add_parser("reset-recall", help="Delete every delayed recall session")
    sub.add_parser("reset-all", help="Delete results, events, recall sessions and participants")

    args = p.parse_args()

    if not os.path.exists(args.db):
        print(f"[ERR] DB not found: {args.db}")
        sys.exit(1)

    backup(args.db)

    if args.mode == "reset-experiment":
        tables = ("task_results", "events", "recall_sessions")
        before = {t: count(args.db, t) for t in tables}
        for t in tables:
            exec_sql(args.db, f"DELETE FROM {t} WHERE experiment_id = ?", (args.experiment,))
        after = {t: count(args.db, t) for t in tables}
        for t in tables:
            print(f"[OK] {t}: {before[t]} -> {after[t]} (experiment_id={args.experiment})")

    elif args.mode == "reset-recall":
        before = count(args.db, "recall_sessions")
        exec_sql(args.db, ["DELETE FROM recall_sessions", "VACUUM"])
        after = count(args.db, "recall_sessions")
        print(f"[OK] recall_sessions: {before} -> {after}")

    elif args.mode == "reset-all":
        tables = ("task_results", "events", "recall_sessions", "participants")
        before = {t: count(args.db, t) for t in tables}
        exec_sql(args.db, [f"DELETE FROM {t}" for t in tables] + ["VACUUM"])
        for t in tables:
            print(f"[OK] {t}: {before[t]} -> {count(args.db, t)} (full reset)")

if __name__ == "__main__":
    main()
