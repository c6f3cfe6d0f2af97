import argparse
import json
from pathlib import Path
import sys


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from localtotp import db
from localtotp.config import load_config
from localtotp.security import HASH_MODES
from localtotp.totp import generate_secret

demo_users = [
    ("alice", "Summer2024!"),
    ("bob", "Winter2023#"),
    ("carol", "N2v!e4Gh1@xQz9Lm"),
    ("dave", "p$7Wz!3rQyT1kM0#"),
]


def main():
    parser = argparse.ArgumentParser(description="Seed demo users with OTP seeds")
    parser.add_argument("--config", default="config.json", help="path to config json")
    parser.add_argument("--out", default="data/users.json", help="where to write provisioning data")
    parser.add_argument("--reprovision", metavar="USERNAME", help="issue a new OTP seed for an existing user and exit")
    args = parser.parse_args()

    cfg = load_config(args.config)
    db.init_db(db.path_from_url(cfg.db_url))

    if args.reprovision:
        otp_seed = generate_secret()
        if not db.set_otp_seed(args.reprovision, otp_seed):
            raise SystemExit(f"Unknown user: {args.reprovision}")
        print("New OTP seed for", args.reprovision + ":", otp_seed)
        return

    users_out = []
    for idx, (username, pwd) in enumerate(demo_users):
        hash_mode = HASH_MODES[idx % len(HASH_MODES)]
        # the last user is left without a seed, TOTP logins must fail for it
        with_otp = idx < len(demo_users) - 1
        created_user = db.create_user(
            username=username,
            password=pwd,
            hash_mode=hash_mode,
            pepper=cfg.pepper,
            with_otp=with_otp,
        )
        users_out.append(
            {
                "username": username,
                "password": pwd,
                "hash_mode": hash_mode,
                "otp_seed": created_user.otp_seed,
            }
        )

    out = Path(args.out)
    out.parent.mkdir(parents=True, exist_ok=True)
    with out.open("w", encoding="utf-8") as f:
        json.dump(users_out, f, indent=2)
    print("Seeded", len(users_out), "users ->", out, "and database")


if __name__ == "__main__":
    main()
